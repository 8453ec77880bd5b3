"""피벗 노드 — Node of the column or row header tree.

Leaves receive the dataset values; every other node recomputes its
aggregator from its children whenever a descendant changes. Children are
kept sorted by key.
"""

from typing import Any, Iterator

from calcapp.pivot.aggregator import Aggregator

# 경로 구분자 — Separator used by node and cell paths
PATH_SEPARATOR: str = "/"

SORT_ASC: str = "asc"
SORT_DESC: str = "desc"


def _sort_key(node: "PivotNode") -> tuple:
    # None 키는 마지막 — None keys sort last
    return (node.key is None, node.key)


class PivotNode:
    """피벗 노드.

    Attributes:
        aggregator: 노드 집계기 (Aggregated value of the node)
        key: 노드 키 (Field value, None for the root)
        title: 표시 제목 (Display title, defaults to the key)
        parent / children: 트리 링크 (Tree links)
    """

    def __init__(self, aggregator: Aggregator, key: Any = None, value: Any = None) -> None:
        self.aggregator: Aggregator = aggregator
        self.key: Any = key
        self.children: list[PivotNode] = []
        self.parent: PivotNode | None = None
        self.sort_mode: str = SORT_ASC
        self._title: str | None = None
        if value is not None:
            self.aggregator.add_value(value)

    # -------------------------------------------------------------------
    # 트리 — Tree
    # -------------------------------------------------------------------
    def add(self, aggregator: Aggregator, key: Any = None, value: Any = None) -> "PivotNode":
        """자식 노드 생성 — Create, attach and return a child node."""
        node: PivotNode = PivotNode(aggregator, key, value)
        self.add_node(node)
        return node

    def add_node(self, child: "PivotNode") -> "PivotNode":
        if child is self:
            raise ValueError("A node cannot be its own parent")
        child.parent = self
        self.children.append(child)
        self._sort()
        return self

    def find(self, key: Any) -> "PivotNode | None":
        return next((child for child in self.children if child.key == key), None)

    def find_by_keys(self, keys: list[Any]) -> "PivotNode | None":
        current: PivotNode | None = self
        for key in keys:
            current = current.find(key)
            if current is None:
                return None
        return current

    def find_recursive(self, key: Any) -> "PivotNode | None":
        for child in self.children:
            if child.key == key:
                return child
            found: PivotNode | None = child.find_recursive(key)
            if found is not None:
                return found
        return None

    def children_at_level(self, level: int) -> list["PivotNode"]:
        if self.level == level:
            return [self]
        result: list[PivotNode] = []
        for child in self.children:
            result.extend(child.children_at_level(level))
        return result

    def last_children(self) -> list["PivotNode"]:
        """잎 노드 목록 — Leaves below this node (the node itself when it is a leaf)."""
        if self.is_leaf:
            return [self]
        result: list[PivotNode] = []
        for child in self.children:
            result.extend(child.last_children())
        return result

    def index(self) -> int:
        if self.parent is None:
            return -1
        return next(i for i, child in enumerate(self.parent.children) if child is self)

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator["PivotNode"]:
        return iter(self.children)

    # -------------------------------------------------------------------
    # 속성 — Properties
    # -------------------------------------------------------------------
    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def level(self) -> int:
        return 0 if self.parent is None else self.parent.level + 1

    @property
    def max_level(self) -> int:
        """첫 가지의 깊이 — Depth following the first children."""
        level: int = 0
        node: PivotNode = self
        while node.children:
            level += 1
            node = node.children[0]
        return level

    @property
    def keys(self) -> list[Any]:
        """루트를 제외한 키 경로 — Keys from the first level down to this node."""
        result: list[Any] = []
        node: PivotNode | None = self
        while node is not None and not node.is_root:
            result.insert(0, node.key)
            node = node.parent
        return result

    @property
    def titles(self) -> list[str]:
        result: list[str] = []
        node: PivotNode | None = self
        while node is not None and not node.is_root:
            result.insert(0, node.title)
            node = node.parent
        return result

    def get_path(self, separator: str = PATH_SEPARATOR) -> str:
        return separator.join(str(key) for key in self.keys)

    @property
    def path(self) -> str:
        return self.get_path()

    @property
    def title(self) -> str:
        if self._title is not None:
            return self._title
        return "" if self.key is None else str(self.key)

    @title.setter
    def title(self, value: str | None) -> None:
        self._title = value

    @property
    def value(self) -> float:
        return self.aggregator.result

    # -------------------------------------------------------------------
    # 값 — Values
    # -------------------------------------------------------------------
    def add_value(self, value: Any) -> "PivotNode":
        self.aggregator.add_value(value)
        return self._update()

    def _update(self) -> "PivotNode":
        if self.children:
            self.aggregator.init()
            for child in self.children:
                self.aggregator.add(child.aggregator)
        if self.parent is not None:
            self.parent._update()
        return self

    def set_sort_mode(self, sort_mode: str) -> "PivotNode":
        if sort_mode in (SORT_ASC, SORT_DESC) and sort_mode != self.sort_mode:
            self.sort_mode = sort_mode
            self._sort()
        return self

    def _sort(self) -> None:
        if len(self.children) > 1:
            self.children.sort(key=_sort_key, reverse=self.sort_mode == SORT_DESC)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key": self.key,
            "title": self._title,
            "value": self.aggregator.formatted_result,
            "children": [child.to_dict() for child in self.children] or None,
        }
        return {name: value for name, value in data.items() if value is not None}

    def __repr__(self) -> str:
        return f"PivotNode({self.key!r}, {len(self.children)})"
