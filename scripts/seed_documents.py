"""Seed documents into the store.

This script:
1. Reads every .md and .txt file from a directory (docs/ by default)
2. Inserts each one as a document, which chunks and embeds it
3. Uses whatever store the settings point at (PostgreSQL or in-memory)

Run: python -m scripts.seed_documents [directory]
"""

import asyncio
import logging
import sys
from pathlib import Path

from apps.api.config import load_settings
from apps.api.container import build_container
from apps.api.services.rag_service import RagService

logger = logging.getLogger(__name__)

SEED_SUFFIXES = (".md", ".txt")


async def seed_directory(rag: RagService, directory: Path) -> list[int]:
    """Insert every seedable file under `directory`, in name order.

    Empty files are skipped. Returns the ids of the created documents.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Seed directory not found: {directory}")

    files = sorted(p for p in directory.iterdir() if p.suffix in SEED_SUFFIXES)
    if not files:
        logger.warning("No .md or .txt files found in %s", directory)
        return []

    logger.info("Found %d files to seed", len(files))

    created = []
    for path in files:
        content = path.read_text(encoding="utf-8")
        if not content.strip():
            logger.warning("Skipping empty file %s", path.name)
            continue

        record = await rag.insert_document(content)
        created.append(record.id)
        logger.info("%s → document %d (%d chunks)", path.name, record.id, record.chunk_count)

    return created


async def main(directory: Path) -> None:
    settings = load_settings()
    container = build_container(settings)
    try:
        created = await seed_directory(container.rag_service, directory)
    finally:
        await container.close()

    logger.info("Seeding complete: %d documents created", len(created))


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
    )
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("docs")
    asyncio.run(main(target))
