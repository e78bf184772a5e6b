# influencer_iq/main.py
import argparse
import copy
import os
import sys
from functools import partial

import yaml
from dotenv import load_dotenv
from tqdm import tqdm

from influencer_iq.pipeline.analyze_influencer import analyze_influencer
from influencer_iq.pipeline.enrich import ALL_PLATFORMS
from influencer_iq.pipeline.relay import relay_prompt
from influencer_iq.store.rankings import InMemoryRankingsStore


# ----------------------------
# Configuration
# ----------------------------

DEFAULT_CONFIG = {
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "models": ["llama3-70b-8192", "llama2-70b-4096", "mixtral-8x7b-32768"],
        "temperature": 0.5,
        "max_tokens": 1500,
        "timeout_sec": 30,
    },
    "rankings": {
        "seed_examples": True,
    },
    "web": {
        "host": "0.0.0.0",
        "port": 8000,
    },
}


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _merge(base: dict, override: dict) -> dict:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: str | None = None) -> dict:
    """
    Load configuration from config.yaml and apply environment variable overrides.
    Configuration hierarchy (highest to lowest precedence):
    1. Environment variables (INFLUENCER_IQ_*, GROQ_API_KEY)
    2. .env file
    3. config.yaml
    4. built-in defaults
    """
    # Load .env file if it exists (does not override existing env vars)
    load_dotenv(override=False)

    path = path or os.getenv("INFLUENCER_IQ_CONFIG", "config.yaml")
    file_cfg = {}
    if os.path.isfile(path):
        with open(path, "r", encoding="utf-8") as f:
            file_cfg = yaml.safe_load(f) or {}
    cfg = _merge(DEFAULT_CONFIG, file_cfg)

    cfg["groq"]["base_url"] = os.getenv(
        "INFLUENCER_IQ_GROQ_BASE_URL",
        cfg["groq"]["base_url"]
    )
    models_env = os.getenv("INFLUENCER_IQ_MODELS")
    if models_env:
        cfg["groq"]["models"] = [m.strip() for m in models_env.split(",") if m.strip()]
    cfg["groq"]["temperature"] = float(os.getenv(
        "INFLUENCER_IQ_TEMPERATURE",
        cfg["groq"]["temperature"]
    ))
    cfg["groq"]["max_tokens"] = int(os.getenv(
        "INFLUENCER_IQ_MAX_TOKENS",
        cfg["groq"]["max_tokens"]
    ))
    cfg["groq"]["timeout_sec"] = float(os.getenv(
        "INFLUENCER_IQ_TIMEOUT_SEC",
        cfg["groq"]["timeout_sec"]
    ))
    cfg["groq"]["api_key"] = os.getenv("GROQ_API_KEY", cfg["groq"].get("api_key"))
    cfg["rankings"]["seed_examples"] = _as_bool(os.getenv(
        "INFLUENCER_IQ_SEED_RANKINGS",
        cfg["rankings"]["seed_examples"]
    ))
    cfg["web"]["host"] = os.getenv("INFLUENCER_IQ_HOST", cfg["web"]["host"])
    cfg["web"]["port"] = int(os.getenv("INFLUENCER_IQ_PORT", cfg["web"]["port"]))

    return cfg


def make_relay(cfg: dict, chat=None):
    """relay(prompt, structured) bound to the configured models and credential."""
    kwargs = {"groq_cfg": cfg["groq"], "api_key": cfg["groq"].get("api_key")}
    if chat is not None:
        kwargs["chat"] = chat
    return partial(relay_prompt, **kwargs)


# ----------------------------
# CLI output
# ----------------------------

def _fmt_score(score) -> str:
    return "n/a" if score is None else f"{score:g}/10"


def print_report(report) -> None:
    a = report.analysis
    print(f"\n=== {report.name} ({report.submission.platform}) ===")
    if report.degraded:
        print("(analysis service unavailable; showing fallback)")
    print(f"Credibility: {_fmt_score(a.credibility_score)}")
    for label, cat in a.categories().items():
        print(f"  {label}: {_fmt_score(cat.score)}")
    print(f"Niche: {report.submission.niche} | Audience: {report.submission.audience}")
    print("")
    print(a.overall_analysis or "No detailed analysis available")


def print_leaderboard(records) -> None:
    print("\n=== Leaderboard ===")
    if not records:
        print("No ranked influencers yet.")
        return
    for i, r in enumerate(records, 1):
        print(f"{i:>3}. {r.name} [{r.platform}] {_fmt_score(r.credibility_score)} ({r.niche}, {r.audience})")


def read_names(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        return [ln.strip() for ln in f if ln.strip() and not ln.lstrip().startswith("#")]


# ----------------------------
# Main
# ----------------------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="InfluencerIQ credibility analysis")
    parser.add_argument("--quiet", action="store_true",
                        help="Suppress DEBUG/INFO output (show only warnings and errors).")
    parser.add_argument("--verbose", action="store_true",
                        help="Show all DEBUG output (overrides --quiet).")
    sub = parser.add_subparsers(dest="command", required=True)

    p_analyze = sub.add_parser("analyze", help="Analyze one influencer or a batch file of names.")
    p_analyze.add_argument("name", nargs="?", default=None, help="Influencer name.")
    p_analyze.add_argument("--platform", type=str, default=ALL_PLATFORMS,
                           help="Fix the platform instead of detecting it from the analysis.")
    p_analyze.add_argument("--batch", type=str, default=None,
                           help="Text file with one influencer name per line.")

    p_serve = sub.add_parser("serve", help="Run the web UI and JSON API.")
    p_serve.add_argument("--host", type=str, default=None)
    p_serve.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    # Set logging level based on CLI flags
    if args.verbose:
        os.environ["INFLUENCER_IQ_LOG_LEVEL"] = "DEBUG"
    elif args.quiet:
        os.environ["INFLUENCER_IQ_LOG_LEVEL"] = "WARNING"
    else:
        os.environ.setdefault("INFLUENCER_IQ_LOG_LEVEL", "INFO")

    cfg = load_config()

    if args.command == "serve":
        from influencer_iq.web.server import serve
        serve(cfg, host=args.host, port=args.port)
        return 0

    if bool(args.name) == bool(args.batch):
        parser.error("analyze takes either a NAME or --batch FILE.")

    if not cfg["groq"].get("api_key"):
        print("WARNING: GROQ_API_KEY is not set; requests will likely fail and fall back.", file=sys.stderr)

    relay = make_relay(cfg)
    store = InMemoryRankingsStore()

    if args.name:
        report = analyze_influencer(args.name, relay, store, platform=args.platform)
        print_report(report)
        return 0

    names = read_names(args.batch)
    degraded = 0
    for name in tqdm(names, desc="Analyzing", unit=" influencer"):
        report = analyze_influencer(name, relay, store, platform=args.platform)
        if report.degraded:
            degraded += 1
    print_leaderboard(store.read_all().results)
    if degraded:
        print(f"\n{degraded}/{len(names)} analyses fell back to the unavailable message.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
