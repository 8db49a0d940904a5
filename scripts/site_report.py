import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from stateflare import create_app
from stateflare.origin import InvalidUrl, normalize_site_origin
from stateflare.stats import get_stats, list_sites


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value} must be 1 or greater")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        description="Print stored UV/PV counters from the Stateflare database."
    )
    parser.add_argument(
        "--site",
        help="Page URL or site origin to look up (normalized the same way /track does).",
    )
    parser.add_argument(
        "--limit",
        type=positive_int,
        default=20,
        help="Number of sites to list, ordered by page views (default: 20).",
    )
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.site:
            try:
                site_origin = normalize_site_origin(args.site)
            except InvalidUrl as exc:
                parser.error(str(exc))
            counts = get_stats(site_origin)
            print(f"{site_origin}\tUV {counts.uv}\tPV {counts.pv}")
            return

        sites = list_sites(limit=args.limit)
        if not sites:
            print("No visits recorded yet.")
            return
        for stats in sites:
            print(f"{stats.site_origin}\tUV {stats.uv}\tPV {stats.pv}\tlast {stats.updated_at:%Y-%m-%d %H:%M}")
        print(f"Total sites shown: {len(sites)}")


if __name__ == "__main__":
    main()
