"""Management CLI commands."""

import json
import sys
from typing import Optional

from config.settings import settings
from resume_ats import HybridAnalysisEngine, ValidationError, create_engine


def read_text(path: str) -> str:
    """Read a UTF-8 text file."""
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def analyze(engine: HybridAnalysisEngine, resume_path: str, job_path: Optional[str] = None) -> int:
    """Run the full hybrid analysis and print the result JSON."""
    job_description = read_text(job_path) if job_path else None
    try:
        tiered = engine.combine_tiered(read_text(resume_path), job_description)
    except ValidationError as e:
        print(json.dumps(e.to_dict(), indent=2))
        return 2
    print(json.dumps(tiered.result.to_dict(), indent=2))
    print(f"\nTier: {tiered.tier.value}", file=sys.stderr)
    return 0


def score(engine: HybridAnalysisEngine, resume_path: str) -> int:
    """Run the rule-based scorer only and print the result JSON."""
    try:
        result = engine.score_rules_only(read_text(resume_path))
    except ValidationError as e:
        print(json.dumps(e.to_dict(), indent=2))
        return 2
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def health(engine: HybridAnalysisEngine) -> int:
    """Print AI key health and cache statistics."""
    print(json.dumps(engine.health_status(), indent=2, default=str))
    return 0


def show_config() -> int:
    """Show effective settings with secrets masked."""
    settings.display_config()
    return 0


def print_usage() -> None:
    print("Usage: python manage.py <command> [args]")
    print("\nCommands:")
    print("  analyze <resume.txt> [job.txt]  - Hybrid AI + rules analysis, prints result JSON")
    print("  score <resume.txt>              - Rule-based score only")
    print("  health                          - AI key health and cache statistics")
    print("  config                          - Show configuration (secrets masked)")


if __name__ == "__main__":
    commands = {
        "analyze": lambda: analyze(
            create_engine(),
            sys.argv[2],
            sys.argv[3] if len(sys.argv) > 3 else None,
        ),
        "score": lambda: score(create_engine(), sys.argv[2]),
        "health": lambda: health(create_engine()),
        "config": show_config,
    }

    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1]
    if command not in commands:
        print(f"Unknown command: {command}")
        print_usage()
        sys.exit(1)

    if command in ("analyze", "score") and len(sys.argv) < 3:
        print(f"Usage: python manage.py {command} <resume.txt>")
        sys.exit(1)

    sys.exit(commands[command]())
