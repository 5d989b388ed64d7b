import argparse
import json
import signal

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run one auction-listing ingestion pass.")
    parser.add_argument("--create-tables", action="store_true",
                        help="create missing tables before running")
    parser.add_argument("--page-size", type=int, default=None,
                        help="override INGEST_PAGE_SIZE for this run")
    args = parser.parse_args(argv)

    try:
        # Import as a package so relative imports inside resolve
        from auction_ingest.config import settings
        from auction_ingest.db import Base, engine
        from auction_ingest.ingest import build_orchestrator
        import auction_ingest.models  # noqa: F401
    except Exception as e:
        raise SystemExit(f"Failed to import 'auction_ingest': {e}")

    if args.create_tables:
        Base.metadata.create_all(bind=engine)
    if args.page_size:
        settings.ingest.page_size = args.page_size

    orchestrator = build_orchestrator(settings)

    def on_sigterm(signum, frame):
        print("SIGTERM received, stopping after the current page...")
        orchestrator.request_stop()

    previous = signal.signal(signal.SIGTERM, on_sigterm)
    print("Running ingestion (same lease as the scheduled job)...")
    try:
        summary = orchestrator.run()
    finally:
        signal.signal(signal.SIGTERM, previous)
    print(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2, default=str))
    return 1 if summary.aborted else 0


if __name__ == "__main__":
    raise SystemExit(main())
