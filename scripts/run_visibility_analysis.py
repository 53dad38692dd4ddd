#!/usr/bin/env python3
"""
Visibility Analysis Runner

Runs the automatic pipeline for one website:
1. Sitemap discovery
2. Content fetching
3. Category generation
4. Prompt generation
5. Answer execution and analysis

Usage:
    # Set environment variables first:
    export OPENAI_API_KEY=your_key
    export ANTHROPIC_API_KEY=your_key   # optional, enables LLM synthesis

    python scripts/run_visibility_analysis.py acmecorp.com --country US --language en

    # With options:
    python scripts/run_visibility_analysis.py acmecorp.ch \
        --country CH --language de --region Zurich \
        --competitor Globex --competitor Initech \
        --output results.json
"""

import asyncio
import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from geo_engine.errors import InputValidationError
from geo_engine.models import RunStatus
from geo_engine.utils.config import get_settings
from geo_engine.workflow import RunSupervisor, WorkflowEngine

logger = logging.getLogger(__name__)

POLL_INTERVAL = 2.0


async def run_visibility_analysis(
    website_url: str,
    country: str,
    language: str,
    region: str = None,
    competitors: list = None,
    output: str = None,
):
    """Run the pipeline in the background and poll until it finishes."""
    settings = get_settings()

    if not settings.OPENAI_API_KEY and not settings.DEBUG_MODE:
        print("ERROR: OPENAI_API_KEY is not set (or enable DEBUG_MODE=true)")
        return None

    print(f"\n{'='*70}")
    print("GEO VISIBILITY ANALYSIS")
    print(f"{'='*70}")
    print(f"Website:      {website_url}")
    print(f"Market:       {country} / {language}{f' / {region}' if region else ''}")
    print(f"Competitors:  {', '.join(competitors) if competitors else '(none)'}")
    print(f"Debug mode:   {settings.DEBUG_MODE}")
    print(f"{'='*70}\n")

    start_time = datetime.now()
    engine = WorkflowEngine.from_settings(settings)
    supervisor = RunSupervisor(engine)

    try:
        run = await supervisor.start({
            "website_url": website_url,
            "country": country,
            "language": language,
            "region": region,
            "competitors": competitors or [],
        })
    except InputValidationError as e:
        print(f"✗ Invalid input: {e}")
        await engine.close()
        return None

    last_message = None
    while supervisor.is_active(run.id):
        status = await supervisor.get_status(run.id)
        if status.message != last_message:
            print(f"[{status.progress:3d}%] {status.step.value:<10} {status.message}")
            last_message = status.message
        await asyncio.sleep(POLL_INTERVAL)

    status = await supervisor.wait(run.id)
    await supervisor.shutdown()

    if status.status != RunStatus.COMPLETED:
        print(f"\n✗ Run {run.id} failed: {status.error}")
        return None

    bundle = await engine.store.get_results(run.id)
    duration = (datetime.now() - start_time).total_seconds()

    print("\n" + "="*70)
    print("ANALYSIS COMPLETE")
    print("="*70)
    print(f"Duration: {duration:.1f} seconds")
    print(f"Categories: {len(bundle.categories)}")
    print(f"Answered prompts: {len(bundle.responses)}")

    summary = bundle.summary
    if summary:
        print(f"Mention rate: {summary.mention_rate:.1%}")
        print(f"Citation rate: {summary.citation_rate:.1%}")
        print(f"Average visibility: {summary.average_visibility:.1f}/100")

    names = {c.id: c.name for c in bundle.categories}
    for metrics in bundle.category_metrics:
        print(
            f"  {names.get(metrics.category_id, metrics.category_id):<28} "
            f"visibility {metrics.visibility_score:5.1f}  "
            f"mentions {metrics.brand_mention_rate:.0%}"
        )

    competitive = bundle.competitive_analysis
    if competitive and competitive.competitor_shares:
        print(f"Brand share of voice: {competitive.brand_share:.1f}%")
        for name, share in competitive.competitor_shares.items():
            print(f"  {name}: {share:.1f}%")
    print("="*70 + "\n")

    if output:
        with open(output, "w") as f:
            json.dump(bundle.to_dict(), f, indent=2)
        print(f"Results saved to: {output}")

    return bundle


def main():
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Measure how AI answer engines mention a website's brand"
    )
    parser.add_argument(
        "website_url",
        help="Website to analyze (e.g., acmecorp.com)"
    )
    parser.add_argument(
        "--country",
        required=True,
        help="Target country code (e.g., US, CH)"
    )
    parser.add_argument(
        "--language",
        required=True,
        help="Content and question language (e.g., en, de, fr)"
    )
    parser.add_argument(
        "--region",
        default=None,
        help="Region or city (optional)"
    )
    parser.add_argument(
        "--competitor",
        action="append",
        default=[],
        help="Competitor brand name (repeatable)"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write the results as JSON to this file"
    )

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    result = asyncio.run(run_visibility_analysis(
        website_url=args.website_url,
        country=args.country,
        language=args.language,
        region=args.region,
        competitors=args.competitor,
        output=args.output,
    ))

    if result is None:
        sys.exit(1)


if __name__ == "__main__":
    main()
