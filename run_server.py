#!/usr/bin/env python3
"""Start the token table API with uvicorn."""
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))


def main():
    import uvicorn

    uvicorn.run(
        "token_table.app:app",
        host=os.getenv("TOKEN_TABLE_HOST", "0.0.0.0"),
        port=int(os.getenv("TOKEN_TABLE_PORT", "8010")),
        reload=False,
    )


if __name__ == "__main__":
    main()
