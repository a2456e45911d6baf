"""Main entry point for apptrace deploy notifications."""

from pathlib import Path

from dotenv import load_dotenv

from apptrace.integrations.deploy import main as notify_main


def main():
    """Notify apptrace of a deploy using the project's .env."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    return notify_main()


if __name__ == "__main__":
    raise SystemExit(main())
