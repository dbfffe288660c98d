"""Resolution of file-local link targets before Jira keys exist."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .parser import IssueSpec


class LinkResolutionError(LookupError):
    """Raised when a link points at a ``spec_id`` missing from the file."""

    def __init__(self, source_id: int, target_id: int) -> None:
        super().__init__(
            f"Unable to find target issue (linksTo) for link from spec_id {source_id}: "
            f"spec_id {target_id} not found"
        )
        self.source_id = source_id
        self.target_id = target_id


def resolve_spec(specs: Iterable[IssueSpec], spec_id: int) -> IssueSpec | None:
    """Return the spec whose ``spec_id`` matches, or ``None``.

    Linear reference lookup; :class:`SpecIndex` must agree with it.
    """
    for spec in specs:
        if spec.spec_id == spec_id:
            return spec
    return None


class SpecIndex:
    """Lookup table from ``spec_id`` to spec, built once per run."""

    def __init__(self, specs: Sequence[IssueSpec]) -> None:
        self._by_id = {spec.spec_id: spec for spec in specs}

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, spec_id: object) -> bool:
        return spec_id in self._by_id

    def get(self, spec_id: int) -> IssueSpec | None:
        return self._by_id.get(spec_id)

    def require(self, spec_id: int, *, source_id: int) -> IssueSpec:
        """Return the target spec or raise :class:`LinkResolutionError`."""
        spec = self.get(spec_id)
        if spec is None:
            raise LinkResolutionError(source_id, spec_id)
        return spec
