from __future__ import annotations

SEED_SIZE = 256


class EncodeDictionary:
    """
    Dizionario LZW lato encoder: bytes -> code.

    Seeded con i 256 byte singoli (b"\\x00" -> 0 ... b"\\xff" -> 255).
    Ogni add() assegna code = len(self) (monotono, senza buchi, mai riusato).
    Vive per un solo chunk: nessuna condivisione tra chunk o thread.
    """

    __slots__ = ("_codes",)

    def __init__(self) -> None:
        self._codes: dict[bytes, int] = {bytes((i,)): i for i in range(SEED_SIZE)}

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, s: bytes) -> bool:
        return s in self._codes

    def code(self, s: bytes) -> int:
        return self._codes[s]

    def add(self, s: bytes) -> int:
        if s in self._codes:
            raise ValueError(f"dictionary: entry duplicata {s!r}")
        code = len(self._codes)
        self._codes[s] = code
        return code


class DecodeDictionary:
    """
    Dizionario LZW lato decoder: code -> bytes.

    I code sono densi (0..len-1), quindi basta una lista.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[bytes] = [bytes((i,)) for i in range(SEED_SIZE)]

    def __len__(self) -> int:
        return len(self._entries)

    def next_code(self) -> int:
        """The code the next add() will assign."""
        return len(self._entries)

    def get(self, code: int) -> bytes | None:
        if 0 <= code < len(self._entries):
            return self._entries[code]
        return None

    def add(self, s: bytes) -> int:
        code = len(self._entries)
        self._entries.append(bytes(s))
        return code
