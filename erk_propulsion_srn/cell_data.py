from typing import Dict, Iterator, List, Optional


class CellData:
    """
    Per-cell store of named scalars.

    Any item name is allowed. Collaborators outside the SRN (mechanics,
    neighbour averaging) write items here, the SRN model reads its
    parameters from it and writes its outputs back.
    """

    def __init__(self, items: Optional[Dict[str, float]] = None, **kwargs):
        self._items: Dict[str, float] = {}
        for name, value in dict(items or {}, **kwargs).items():
            self.set_item(name, value)

    def set_item(self, name: str, value: float):
        self._items[name] = float(value)

    def get_item(self, name: str) -> float:
        # KeyError propagates; the marshaller turns it into MissingParameterError
        return self._items[name]

    def has_item(self, name: str) -> bool:
        return name in self._items

    def keys(self) -> List[str]:
        return sorted(self._items)

    def copy(self) -> "CellData":
        return CellData(dict(self._items))

    def __getitem__(self, name: str) -> float:
        return self.get_item(name)

    def __setitem__(self, name: str, value: float):
        self.set_item(name, value)

    def __contains__(self, name) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self):
        return f"CellData({self._items!r})"
