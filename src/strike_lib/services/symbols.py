"""Symbols-file loader: one ticker per line, ``#`` starts a comment."""

from pathlib import Path
from typing import Union

from src.strike_lib.core.errors import InvalidParameter


def read_symbols(path: Union[str, Path]) -> list[str]:
    """Return upper-cased, de-duplicated symbols in file order.

    Raises:
        FileNotFoundError: *path* does not exist.
        InvalidParameter: the file holds no symbols.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"symbols file not found: {path}")

    symbols: list[str] = []
    seen: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        symbol = line.split("#", 1)[0].strip().upper()
        if symbol and symbol not in seen:
            seen.add(symbol)
            symbols.append(symbol)

    if not symbols:
        raise InvalidParameter(f"symbols file is empty: {path}")
    return symbols
