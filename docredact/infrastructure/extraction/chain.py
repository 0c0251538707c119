"""
Ordered extraction fallback chain.

Tiers are tried in order and the first success wins. A tier that raises is
retried within its own budget when the error is retryable, then the chain
moves on. When every tier has failed the page fails with a classified reason.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Sequence

from docredact.domain.entities.documents import PageDocument
from docredact.domain.exceptions import ExtractionFailedError, ExtractionTierError

from .base import ExtractionMode, ExtractionOutcome, ExtractionStrategy
from .failure_classifier import classify_errors

logger = logging.getLogger(__name__)


class ExtractionChain:
    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy],
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not strategies:
            raise ValueError("an extraction chain needs at least one strategy")
        self._strategies = list(strategies)
        self._sleep = sleep

    @property
    def methods(self) -> List[str]:
        return [s.name for s in self._strategies]

    def extract(self, page: PageDocument, mode: ExtractionMode = ExtractionMode.STANDARD) -> ExtractionOutcome:
        """
        Run the tiers for one page.

        Raises:
            ExtractionFailedError: every tier failed.
        """
        errors: List[Exception] = []

        for strategy in self._strategies:
            try:
                outcome = self._run_with_policy(strategy, page, mode)
            except Exception as exc:
                errors.append(exc if isinstance(exc, ExtractionTierError) else ExtractionTierError(
                    strategy.name, f"{type(exc).__name__}: {exc}",
                ))
                logger.info("Extraction tier %s failed for page %s: %s", strategy.name, page.page_number, exc)
                continue

            outcome.method = outcome.method or strategy.name
            for extracted in outcome.fields:
                extracted.page_index = page.index
            logger.info(
                "Page %s extracted via %s (%d fields)",
                page.page_number, outcome.method, len(outcome.fields),
            )
            return outcome

        reason = classify_errors(errors)
        logger.error("All extraction tiers failed for page %s: %s", page.page_number, reason.value)
        raise ExtractionFailedError(
            page.index,
            reason,
            tier_errors=[str(e) for e in errors],
        )

    def _run_with_policy(
        self,
        strategy: ExtractionStrategy,
        page: PageDocument,
        mode: ExtractionMode,
    ) -> ExtractionOutcome:
        policy = strategy.policy
        attempt = 1
        while True:
            try:
                return strategy.extract(page, mode)
            except ExtractionTierError as exc:
                if not exc.retryable or attempt >= policy.max_attempts:
                    raise
                delay = policy.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Retrying %s for page %s (attempt %d/%d) in %.1fs: %s",
                    strategy.name, page.page_number, attempt + 1, policy.max_attempts, delay, exc,
                )
                if delay > 0:
                    self._sleep(delay)
                attempt += 1
