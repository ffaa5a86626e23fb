# Copyright (c) Syntropy Systems
"""Reference sample executor that runs a use case under a contract."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Generic, TypeVar

from veritune.contract import PreconditionError, SampleOutcome

from .errors import ExecutionError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from veritune.contract import ServiceContract
    from veritune.models.factors import FactorSuit

logger = logging.getLogger(__name__)

I = TypeVar("I")  # noqa: E741
R = TypeVar("R")


class ContractSampleExecutor(Generic[I, R]):
    """Produce samples by calling ``use_case(factor_suit, input)``.

    Inputs are used round-robin. ``tokens`` optionally reads the token
    count from each result. With ``max_workers > 1`` samples run on a
    thread pool; results keep input order either way.

    Any precondition violation or use case exception fails the whole batch
    with ``ExecutionError``.
    """

    def __init__(
        self,
        use_case: Callable[[FactorSuit, I], R],
        contract: ServiceContract[I, R],
        inputs: Sequence[I],
        tokens: Callable[[R], int] | None = None,
        max_workers: int = 1,
    ) -> None:
        if not inputs:
            msg = "inputs must not be empty"
            raise ValueError(msg)
        if max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise ValueError(msg)
        self.use_case = use_case
        self.contract = contract
        self.inputs = list(inputs)
        self.tokens = tokens
        self.max_workers = max_workers

    def _sample(self, factor_suit: FactorSuit, index: int) -> SampleOutcome[R]:
        input_value = self.inputs[index % len(self.inputs)]
        return SampleOutcome.capture(
            self.contract,
            input_value,
            partial(self.use_case, factor_suit),
            tokens=self.tokens if self.tokens is not None else 0,
            metadata={"sample_index": index},
        )

    def __call__(self, factor_suit: FactorSuit, sample_count: int) -> list[SampleOutcome[R]]:
        logger.debug("Running %d samples for %s", sample_count, factor_suit)
        run_one = partial(self._sample, factor_suit)
        try:
            if self.max_workers == 1:
                return [run_one(i) for i in range(sample_count)]
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(pool.map(run_one, range(sample_count)))
        except PreconditionError as e:
            msg = str(e)
            raise ExecutionError(msg) from e
        except Exception as e:
            msg = f"Use case raised {type(e).__name__}: {e}"
            raise ExecutionError(msg) from e

