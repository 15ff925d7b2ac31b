"""
Main entry point for the model catalog updater.

Run this file to refresh every provider's catalog, providers.json and
FEATURE_MATRIX.md. Pass provider slugs to refresh only those providers.
"""
import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from modelcatalog.catalog.assembler import CatalogAssembler
from modelcatalog.config import Config
from modelcatalog.logger import get_logger
from modelcatalog.providers import provider_keys

logger = get_logger(__name__)


def main(argv=None) -> int:
    """Main function to run the catalog update."""
    parser = argparse.ArgumentParser(description="Refresh the AI model catalog from provider documentation.")
    parser.add_argument(
        "providers",
        nargs="*",
        help=f"Provider slugs to update (default: all of {', '.join(provider_keys())})",
    )
    args = parser.parse_args(argv)

    unknown = sorted(set(args.providers) - set(provider_keys()))
    if unknown:
        parser.error(f"unknown provider(s): {', '.join(unknown)}")

    # Validate configuration
    errors = Config.validate()
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        return 2

    logger.info(f"Configuration: {Config.get_summary()}")

    assembler = CatalogAssembler.from_config()
    summary = assembler.run(assembler.build_pipelines(args.providers or None))

    if summary.failed:
        logger.warning(f"Providers without fresh data: {', '.join(summary.failed)}")
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
