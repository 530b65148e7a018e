"""Command-line interface for planning and routing.

Works offline: without API keys, intent analysis uses the keyword
classifier and routing never calls a model.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Optional

from gala.config import EngineConfig
from gala.orchestration import AIOrchestrator
from gala.routing import IntelligentRouter, RouterPreferences

MAX_PREVIEW_LEN = 200


def _truncate(text: str, max_len: int = MAX_PREVIEW_LEN) -> str:
    """Truncate text with ellipsis if too long."""
    text = text.replace("\n", " ").strip()
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def _context(args: argparse.Namespace) -> Optional[dict[str, Any]]:
    if args.files:
        return {"files": args.files}
    return None


def _cmd_intent(args: argparse.Namespace, config: EngineConfig) -> int:
    orchestrator = AIOrchestrator(config)
    intent = asyncio.run(orchestrator.analyze_intent(args.request, _context(args)))
    print(json.dumps(intent.model_dump(), indent=2))
    return 0


def _cmd_plan(args: argparse.Namespace, config: EngineConfig) -> int:
    orchestrator = AIOrchestrator(config)
    if args.json:
        plan = asyncio.run(orchestrator.create_orchestration_plan(args.request, _context(args)))
        print(plan.model_dump_json(indent=2))
    else:
        print(asyncio.run(orchestrator.gala(args.request, _context(args))))
    return 0


def _cmd_audit(args: argparse.Namespace, config: EngineConfig) -> int:
    orchestrator = AIOrchestrator(config)
    result = asyncio.run(orchestrator.self_audit(args.request, _context(args)))
    print(f"Intent:     {result.intent.intent} ({result.intent.confidence:.2f})")
    print(f"Confidence: {result.confidence:.2f}")
    for gap in result.missing_tools + result.missing_integrations:
        print(f"  missing {gap.type}: {gap.name} [{gap.severity}]")
    for action in result.actions:
        print(f"  -> {action.kind}: {action.description}")
    return 0


def _cmd_route(args: argparse.Namespace, config: EngineConfig) -> int:
    router = IntelligentRouter(
        preferences=RouterPreferences(
            prefer_local=args.prefer_local,
            max_cost=args.max_cost,
            min_quality=args.min_quality,
        )
    )
    context = {"has_images": args.has_images}
    analysis = router.analyze_task(args.request, context)
    decisions = router.get_recommendations(args.request, context)

    print("=" * 60)
    print("TASK ANALYSIS")
    print("=" * 60)
    print(f"Category:   {analysis.category.value}")
    print(f"Complexity: {analysis.complexity}")
    print(f"Vision:     {'yes' if analysis.requires_vision else 'no'}")
    print(f"Functions:  {'yes' if analysis.requires_functions else 'no'}")
    print()
    print("=" * 60)
    print("RECOMMENDATIONS")
    print("=" * 60)
    for index, decision in enumerate(decisions, start=1):
        print(f"{index}. {decision.provider.value}/{decision.model} ({decision.confidence:.2f})")
        print(f"   {_truncate(decision.reasoning)}")
    return 0


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="gala",
        description="Gala CLI - multi-agent planning and model routing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    intent = subparsers.add_parser("intent", help="Classify a request")
    plan = subparsers.add_parser("plan", help="Show the orchestration plan for a request")
    audit = subparsers.add_parser("audit", help="Report missing tools and integrations")
    for sub in (intent, plan, audit):
        sub.add_argument("request", help="Natural-language request")
        sub.add_argument("--files", nargs="*", default=[], metavar="PATH", help="Attached files")
    plan.add_argument("--json", action="store_true", help="Print the plan as JSON")

    route = subparsers.add_parser("route", help="Recommend a model for a request")
    route.add_argument("request", help="Natural-language request")
    route.add_argument("--has-images", action="store_true", help="Request includes images")
    route.add_argument("--prefer-local", action="store_true", help="Only consider local models")
    route.add_argument("--max-cost", type=int, default=10, metavar="N", help="Cost ceiling 1-10")
    route.add_argument("--min-quality", type=int, default=5, metavar="N", help="Quality floor 1-10")

    intent.set_defaults(handler=_cmd_intent)
    plan.set_defaults(handler=_cmd_plan)
    audit.set_defaults(handler=_cmd_audit)
    route.set_defaults(handler=_cmd_route)
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """Run the Gala CLI."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EngineConfig()
        sys.exit(args.handler(args, config))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
