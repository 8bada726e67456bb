import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from token_table.engine.session import TableSession
from token_table.feeds.spot import SpotFeed
from token_table.jobs.refresh import run_cycle


async def main() -> None:
    session = TableSession.from_settings()
    async with SpotFeed() as feed:
        count = await run_cycle(session, feed)
    view = session.view()
    print(f"Fetched records: {count}")
    print(f"Sorted by {view.sort.key} ({view.sort.direction.value})")
    labels = [col.label for col in view.columns]
    print(" | ".join(["#"] + labels))
    for row in view.rows[:10]:
        cells = [row.cells[col.key].text for col in view.columns]
        print(" | ".join([str(row.index)] + cells))


if __name__ == "__main__":
    asyncio.run(main())
