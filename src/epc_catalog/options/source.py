"""Option sources - where a selector gets its pages from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .mapping import OPTION_FIELDS, OptionKind, PART_KINDS, PartKind
from .types import Option, OptionPage

if TYPE_CHECKING:
    from ..backends.base import CatalogBackend


class OptionSource(ABC):
    """
    Base class for option sources.

    ``parent`` is the upstream selector's current selection, or None for a
    root selector.
    """

    @abstractmethod
    async def fetch_page(
        self,
        page: int,
        page_size: int,
        search: str = "",
        parent: Option | None = None,
    ) -> OptionPage:
        """
        Fetch one page of options.

        Args:
            page: 1-based page number
            page_size: Options per page
            search: Free-text filter (may be empty)
            parent: Selected option of the upstream level

        Returns:
            The page, with ``has_more`` telling whether another exists
        """
        ...

    def belongs_to(self, option: Option, parent: Option | None) -> bool:
        """Whether ``option`` may sit under ``parent``. Unknown means yes."""
        return True


def paginate_locally(
    options: list[Option],
    page: int,
    page_size: int,
    search: str = "",
) -> OptionPage:
    """Search and slice an in-memory option list like a remote source would."""
    term = search.strip().lower()
    if term:
        options = [o for o in options if term in o.label.lower()]
    start = (page - 1) * page_size
    end = start + page_size
    return OptionPage(
        items=options[start:end],
        has_more=end < len(options),
        total=len(options),
    )


class RemoteOptionSource(OptionSource):
    """Lists options of one kind from the catalogue service, filtered by parent id."""

    def __init__(self, backend: CatalogBackend, kind: OptionKind):
        self.backend = backend
        self.kind = kind

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        search: str = "",
        parent: Option | None = None,
    ) -> OptionPage:
        return await self.backend.list_options(
            self._resolve_kind(parent),
            page,
            page_size,
            search=search,
            parent_id=parent.id if parent is not None else None,
        )

    def _resolve_kind(self, parent: Option | None) -> OptionKind:
        return self.kind

    def belongs_to(self, option: Option, parent: Option | None) -> bool:
        parent_field = OPTION_FIELDS[self.kind].parent_filter
        if parent is None or parent_field is None or option.data.get(parent_field) is None:
            return True
        return str(option.data[parent_field]) == parent.id


class PartEntitySource(RemoteOptionSource):
    """
    Lists part entities for whichever part kind is selected upstream.

    The parent is the part-type option, whose id is a ``PartKind`` value.
    Part lists are not filtered by parent id on the service side.
    """

    def __init__(self, backend: CatalogBackend):
        super().__init__(backend, OptionKind.CABIN)

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        search: str = "",
        parent: Option | None = None,
    ) -> OptionPage:
        if parent is None:
            return OptionPage()
        return await self.backend.list_options(
            self._resolve_kind(parent),
            page,
            page_size,
            search=search,
        )

    def _resolve_kind(self, parent: Option | None) -> OptionKind:
        return PartKind(parent.id).option_kind

    def belongs_to(self, option: Option, parent: Option | None) -> bool:
        return parent is None or option.kind is None or option.kind == parent.id


class StaticOptionSource(OptionSource):
    """Fixed list of options, searched and paged in memory."""

    def __init__(self, options: list[Option]):
        self.options = list(options)

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        search: str = "",
        parent: Option | None = None,
    ) -> OptionPage:
        return paginate_locally(self.options, page, page_size, search)


class NestedTypeSource(OptionSource):
    """Sub-types embedded in the selected part record. Never hits the network."""

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        search: str = "",
        parent: Option | None = None,
    ) -> OptionPage:
        if parent is None or parent.kind is None:
            return OptionPage()
        mapping = PART_KINDS[PartKind(parent.kind)]
        return paginate_locally(mapping.type_options(parent.data), page, page_size, search)

    def belongs_to(self, option: Option, parent: Option | None) -> bool:
        # Stub parents loaded from a saved document carry no nested types
        if parent is None or parent.kind is None or not parent.data:
            return True
        mapping = PART_KINDS[PartKind(parent.kind)]
        return option.id in {t.id for t in mapping.type_options(parent.data)}
