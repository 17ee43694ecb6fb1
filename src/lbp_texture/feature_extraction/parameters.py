"""
Parameter settings shared by LBP models.

All models and samples that are compared with each other must be built from
the same parameters. The (p, r, b) triples are kept in a canonical order so
that two parameter sets built from the same triples in a different order
compare equal and serialize identically.
"""
import numbers
import re
from typing import Iterable, List, Sequence, Tuple

from ..exceptions import ParameterError

Triple = Tuple[int, int, int]

# Resolutions suggested by Ojala et al.: (P=8, R=1), (P=16, R=2), (P=24, R=3)
DEFAULT_RESOLUTIONS: List[Triple] = [(8, 1, 10), (16, 2, 10), (24, 3, 10)]

_INTEGER = re.compile(r"-?[0-9]+")


def _as_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ParameterError(f"{name} must be an integer, got {value!r}")
    return int(value)


class LBPParameters:
    """
    Canonical, ordered list of (neighbors, radius, variance bins) triples.

    Set the number of variance bins to zero for a resolution to ignore local
    variance data there.
    """

    def __init__(self,
                 neighbors: Sequence[int],
                 radii: Sequence[int],
                 bins: Sequence[int]):
        """
        Args:
            neighbors: Number of neighbors p per resolution (>= 1)
            radii: Radius r per resolution (>= 1)
            bins: Number of variance histogram bins b per resolution (>= 0)
        """
        neighbors, radii, bins = list(neighbors), list(radii), list(bins)
        if not (len(neighbors) == len(radii) == len(bins)):
            raise ParameterError(
                "neighbors, radii and bins must have the same length "
                f"(got {len(neighbors)}, {len(radii)}, {len(bins)})"
            )
        if not neighbors:
            raise ParameterError("At least one (p, r, b) triple is required")

        triples = []
        for p, r, b in zip(neighbors, radii, bins):
            p = _as_int(p, "neighbors")
            r = _as_int(r, "radius")
            b = _as_int(b, "bins")
            if p < 1:
                raise ParameterError(f"neighbors must be >= 1, got {p}")
            if r < 1:
                raise ParameterError(f"radius must be >= 1, got {r}")
            if b < 0:
                raise ParameterError(f"bins must be >= 0, got {b}")
            triples.append((p, r, b))

        self._triples: Tuple[Triple, ...] = tuple(
            sorted(triples, key=lambda t: (-t[0], -t[1], -t[2]))
        )

    @classmethod
    def single(cls, neighbors: int, radius: int, bins: int) -> "LBPParameters":
        """Parameters for a single resolution."""
        return cls([neighbors], [radius], [bins])

    @classmethod
    def from_triples(cls, triples: Iterable[Sequence[int]]) -> "LBPParameters":
        """Build parameters from an iterable of (p, r, b) triples."""
        try:
            triples = [tuple(t) for t in triples]
        except TypeError:
            raise ParameterError(
                f"Expected an iterable of (p, r, b) triples, got {triples!r}"
            ) from None
        for t in triples:
            if len(t) != 3:
                raise ParameterError(f"Expected a (p, r, b) triple, got {t!r}")
        if not triples:
            return cls([], [], [])
        neighbors, radii, bins = zip(*triples)
        return cls(neighbors, radii, bins)

    @classmethod
    def from_string(cls, s: str) -> "LBPParameters":
        """
        Parse a parameter string as produced by ``to_string``.

        Args:
            s: String of the form "p/r/b:p/r/b:..."

        Returns:
            LBPParameters instance
        """
        triples = []
        for field in s.strip().split(":"):
            subs = field.split("/")
            if len(subs) != 3:
                raise ParameterError(
                    f"Invalid parameter string {s!r}: expected 3 fields in "
                    f"{field!r}, got {len(subs)}"
                )
            if not all(_INTEGER.fullmatch(x.strip()) for x in subs):
                raise ParameterError(
                    f"Invalid parameter string {s!r}: non-integer field in {field!r}"
                )
            triples.append(tuple(int(x) for x in subs))
        return cls.from_triples(triples)

    def size(self) -> int:
        """Number of resolutions."""
        return len(self._triples)

    def __len__(self) -> int:
        return len(self._triples)

    def __iter__(self):
        return iter(self._triples)

    def __getitem__(self, index: int) -> Triple:
        return self._triples[index]

    @property
    def triples(self) -> List[Triple]:
        return list(self._triples)

    @property
    def neighbors(self) -> List[int]:
        return [t[0] for t in self._triples]

    @property
    def radii(self) -> List[int]:
        return [t[1] for t in self._triples]

    @property
    def bins(self) -> List[int]:
        return [t[2] for t in self._triples]

    def __eq__(self, other) -> bool:
        if not isinstance(other, LBPParameters):
            return NotImplemented
        return self._triples == other._triples

    def __hash__(self) -> int:
        return hash(self._triples)

    def to_string(self) -> str:
        return ":".join(f"{p}/{r}/{b}" for p, r, b in self._triples)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"LBPParameters({self.to_string()!r})"
