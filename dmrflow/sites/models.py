"""
Per-site differential methylation records
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from ..config.chromosomes import standardize_chromosome
from ..utils.validation import InvalidInput

# Canonical columns of a site table; the index holds the site identifier
SITE_COLUMNS = ["chromosome", "position", "effect", "score"]


@dataclass(frozen=True)
class Site:
    """A single tested genomic position (e.g. one array probe)"""

    identifier: str
    chromosome: str
    position: int
    effect: float
    score: float

    def __post_init__(self):
        identifier = str(self.identifier)
        if not identifier:
            raise InvalidInput("Site identifier cannot be empty")

        try:
            position = float(self.position)
            effect = float(self.effect)
            score = float(self.score)
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Site {identifier} has non-numeric values: {e}")

        if not position.is_integer() or position < 0:
            raise InvalidInput(
                f"Site {identifier} has invalid position: {self.position}"
            )
        if not math.isfinite(effect):
            raise InvalidInput(f"Site {identifier} has non-finite effect: {self.effect}")
        if math.isnan(score) or not 0.0 <= score <= 1.0:
            raise InvalidInput(
                f"Site {identifier} has score outside [0, 1]: {self.score}"
            )

        object.__setattr__(self, "identifier", identifier)
        object.__setattr__(self, "chromosome", standardize_chromosome(self.chromosome))
        object.__setattr__(self, "position", int(position))
        object.__setattr__(self, "effect", effect)
        object.__setattr__(self, "score", score)

    @classmethod
    def from_record(
        cls, identifier: str, record: Union["Site", Sequence[Any], Mapping[str, Any]]
    ) -> "Site":
        """
        Build a site from a mapping value

        Accepts an existing Site, a (chromosome, position, effect, score)
        sequence or a mapping with those keys.
        """
        if isinstance(record, Site):
            if record.identifier != str(identifier):
                raise InvalidInput(
                    f"Site keyed as {identifier} carries identifier {record.identifier}"
                )
            return record

        if isinstance(record, Mapping):
            try:
                return cls(
                    identifier=identifier,
                    chromosome=record["chromosome"],
                    position=record["position"],
                    effect=record["effect"],
                    score=record["score"],
                )
            except KeyError as e:
                raise InvalidInput(f"Site {identifier} is missing field {e}")

        if isinstance(record, (str, bytes)) or len(record) != 4:
            raise InvalidInput(
                f"Site {identifier} must be (chromosome, position, effect, score)"
            )

        chromosome, position, effect, score = record
        return cls(identifier, chromosome, position, effect, score)
