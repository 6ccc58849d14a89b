import logging
from typing import Any, Callable, Iterable, List, Optional

from ..events import dispatch
from ..storage.base import MembershipCriterion
from .base import Filter, TextPredicate

logger = logging.getLogger(__name__)

OptionsAdapter = Callable[['MultiSelectFilter'], Any]


class MultiSelectFilter(Filter):
    """
    A set of selected options drawn from the values present in the data.

    The selection is always a subset of the option universe: shrinking the
    universe drops selections that left it, and selecting an option outside
    the universe does nothing. An empty selection excludes nothing.
    """

    def __init__(self, key: str, name: str, options: Iterable[Any] = ()):
        super().__init__(key, name)
        self._options: List[Any] = []
        self._selected: List[Any] = []
        self._adapter: Optional[OptionsAdapter] = None
        self.set_options(options)

    @property
    def options(self) -> List[Any]:
        """Copy of the option universe, sorted."""
        return list(self._options)

    @property
    def selected_options(self) -> List[Any]:
        """Copy of the selection in the order options were selected."""
        return list(self._selected)

    def set_options(self, options: Iterable[Any]) -> bool:
        """
        Replace the option universe and drop selections no longer in it.

        The bound adapter, if any, is called before this returns when the
        universe changed.

        Returns:
            True if the universe changed
        """
        universe = sorted({option for option in options if option is not None}, key=str)
        changed = universe != self._options
        self._options = universe
        members = set(universe)
        dropped = [option for option in self._selected if option not in members]
        if dropped:
            logger.debug(f"Filter {self.key} dropped selections {dropped}")
            self._selected = [option for option in self._selected if option in members]
        if changed and self._adapter is not None:
            dispatch([self._adapter], (self,), source=f"filter {self.key}")
        return changed

    def select_option(self, option: Any) -> bool:
        """Add an option to the selection; False if it is outside the universe or already selected."""
        if option not in self._options or option in self._selected:
            return False
        self._selected.append(option)
        return True

    def deselect_option(self, option: Any) -> bool:
        if option not in self._selected:
            return False
        self._selected.remove(option)
        return True

    def set_selected_options(self, options: Iterable[Any]) -> None:
        """Replace the selection, ignoring options outside the universe."""
        self._selected = []
        for option in options:
            self.select_option(option)

    def clear_selection(self) -> None:
        self._selected.clear()

    def reset(self) -> None:
        self.clear_selection()

    def is_selected(self, option: Any) -> bool:
        return option in self._selected

    @property
    def is_active(self) -> bool:
        return bool(self._selected)

    def matching_options(self, substring: str) -> List[Any]:
        """Options containing ``substring``, ignoring case."""
        predicate = TextPredicate(substring)
        return [option for option in self._options if predicate(option)]

    def bind_adapter(self, adapter: OptionsAdapter) -> None:
        """Attach the presentation adapter told about universe changes, replacing any other."""
        if self._adapter is not None and self._adapter is not adapter:
            logger.debug(f"Filter {self.key} adapter replaced")
        self._adapter = adapter

    def unbind_adapter(self) -> None:
        self._adapter = None

    @property
    def adapter(self) -> Optional[OptionsAdapter]:
        return self._adapter

    def accepts(self, value: Any) -> bool:
        return not self._selected or value in self._selected

    def to_criterion(self, column: str) -> Optional[MembershipCriterion]:
        if not self._selected:
            return None
        return MembershipCriterion(column, tuple(self._selected))
