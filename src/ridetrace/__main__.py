"""
Command-line entrypoint: decode one .fit file, print the analytics as JSON.

Usage:
    python -m ridetrace --fit ride.fit               # analytics only
    python -m ridetrace --fit ride.fit --ftp 250     # + power zones
    python -m ridetrace --fit ride.fit --upload      # + store the simplified series
    uvicorn ridetrace.api.main:app --port 8000       # HTTP API

Logs go to stderr; stdout carries nothing but the JSON document.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("ridetrace")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ridetrace",
        description="Derive power/HR analytics and a simplified track from a FIT recording",
    )
    parser.add_argument("--fit", required=True, help="Path to the .fit file to process")
    parser.add_argument(
        "--ftp", type=int, default=0,
        help="Threshold power in watts; enables power zones when > 0",
    )
    parser.add_argument(
        "--upload", action="store_true",
        help="Upload the simplified timeseries to the configured S3 bucket",
    )
    parser.add_argument("--identity-id", help="Identity path segment for the upload")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    from ridetrace.analysis.pipeline import process_activity, upload_timeseries
    from ridetrace.config import get_settings
    from ridetrace.errors import ActivityError
    from ridetrace.fit.decoder import decode_fit_file
    from ridetrace.models.output import ActivityOutput
    from ridetrace.storage.s3_sink import build_sink, make_key_generator

    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        decoded = decode_fit_file(Path(args.fit))
        processed = process_activity(
            decoded,
            ftp=args.ftp,
            tolerance=settings.simplify_tolerance,
            np_window=settings.np_window_seconds,
        )
    except ActivityError as exc:
        logger.error("Failed to process activity: %s", exc)
        print(f"Failed to process activity: {exc}", file=sys.stderr)
        return 1

    if args.upload:
        sink = build_sink(settings.s3_bucket, settings.s3_region)
        if sink is None:
            logger.warning("--upload given but S3_BUCKET is not configured; skipping upload")
        else:
            upload_timeseries(
                processed,
                sink,
                identity_id=args.identity_id or settings.identity_id,
                key_generator=make_key_generator(settings.timeseries_key_prefix),
            )

    payload = ActivityOutput.from_processed(processed).to_payload()
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
