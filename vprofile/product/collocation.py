"""
Collocation results between two datasets.

A collocation result lists matching sample pairs between dataset A and
dataset B. Each pair carries a collocation index, which is also stored as the
``collocation_index`` variable in collocated products; it is the key used to
line up the samples of a product with those of its collocated counterparts.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from vprofile.exceptions import InvalidArgumentError
from vprofile.product.naming import COLLOCATION_INDEX, INDEX
from vprofile.product.product import Product
from vprofile.product.variable import DimensionType, Variable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollocationPair:
    """A matching pair of samples.

    Attributes:
        collocation_index: Unique identifier of the pair
        product_index_a: Position of the source product in dataset A
        sample_index_a: Sample index within that product
        product_index_b: Position of the source product in dataset B
        sample_index_b: Sample index within that product
    """
    collocation_index: int
    product_index_a: int
    sample_index_a: int
    product_index_b: int
    sample_index_b: int


@dataclass
class Dataset:
    """A list of source products, with the products that are available in memory."""
    source_product: List[str] = field(default_factory=list)
    products: Dict[str, Product] = field(default_factory=dict)

    @property
    def num_products(self) -> int:
        return len(self.source_product)

    def get_product(self, source_product: str) -> Optional[Product]:
        return self.products.get(source_product)

    def add_product(self, source_product: str, product: Optional[Product] = None) -> None:
        if source_product not in self.source_product:
            self.source_product.append(source_product)
        if product is not None:
            product.source_product = source_product
            self.products[source_product] = product

    def index_of(self, source_product: str) -> int:
        try:
            return self.source_product.index(source_product)
        except ValueError:
            raise InvalidArgumentError(f"dataset has no product '{source_product}'") from None


class CollocationResult:
    """Pairs of collocated samples between dataset A and dataset B."""

    def __init__(self, dataset_a: Dataset, dataset_b: Dataset, pairs: Optional[Iterable[CollocationPair]] = None):
        self.dataset_a = dataset_a
        self.dataset_b = dataset_b
        self.pairs: List[CollocationPair] = list(pairs or [])

    @property
    def num_pairs(self) -> int:
        return len(self.pairs)

    def shallow_copy(self) -> "CollocationResult":
        """Copy of the pair list sharing the datasets."""
        return CollocationResult(self.dataset_a, self.dataset_b, self.pairs)

    def filter_for_collocation_indices(self, collocation_indices: Iterable[int]) -> None:
        """Keep only the pairs whose collocation index is in the given list."""
        wanted = {int(i) for i in np.asarray(list(collocation_indices)).ravel()}
        before = len(self.pairs)
        self.pairs = [pair for pair in self.pairs if pair.collocation_index in wanted]
        logger.debug(f"Filtered collocation result from {before} to {len(self.pairs)} pairs")

    def get_filtered_product_b(self, source_product: str) -> Optional[Product]:
        """
        Samples of a dataset B product that take part in a collocation pair.

        Rows are returned in pair order and carry the matching
        ``collocation_index``. Samples are located by the product's ``index``
        variable when it has one, otherwise by row position.

        Returns:
            The filtered product, or None when no pair refers to the product

        Raises:
            InvalidArgumentError: If pairs refer to a product that is not available
        """
        product_index = self.dataset_b.index_of(source_product)
        pairs = [pair for pair in self.pairs if pair.product_index_b == product_index]
        if not pairs:
            return None

        product = self.dataset_b.get_product(source_product)
        if product is None:
            raise InvalidArgumentError(f"product '{source_product}' of dataset b is not available")

        num_samples = product.dimension[DimensionType.TIME]
        if product.has_variable(INDEX):
            row_of = {int(value): row for row, value in enumerate(product.get_variable(INDEX).data)}
        else:
            row_of = {row: row for row in range(num_samples)}

        rows = []
        for pair in pairs:
            row = row_of.get(pair.sample_index_b)
            if row is None:
                raise InvalidArgumentError(
                    f"product '{source_product}' has no sample with index {pair.sample_index_b}"
                )
            rows.append(row)

        filtered = product.copy()
        filtered.select_rows(rows)
        if filtered.has_variable(COLLOCATION_INDEX):
            filtered.remove_variable(COLLOCATION_INDEX)
        collocation_index = np.array([pair.collocation_index for pair in pairs], dtype=np.int32)
        filtered.add_variable(Variable(COLLOCATION_INDEX, collocation_index, (DimensionType.TIME,)))

        logger.debug(f"Selected {len(rows)} samples from '{source_product}'")
        return filtered
