"""
Category discovery - find the post types worth exporting.

Managed hosts often restrict or break ``wp post-type list``: the session
closes, a plugin prints a PHP warning to stdout, or ``--public`` is not
honoured.  Discovery therefore walks an ordered chain of strategies and
takes the first one that yields a usable list.

Manifesto:
    - **Never zero:** when every query strategy fails, the manual
      strategy supplies the baseline ``("post", "page")``
    - **Soft strategy failure:** a failed strategy is a warning naming the
      strategy, never an exception
    - **Immutable result:** the category list is a tuple, fixed for the run

Architecture:
    ::

        ┌──────────────┐   fail   ┌────────────────┐   fail   ┌─────────────┐   fail   ┌──────────┐
        │ structured   │────────▶│ unstructured   │────────▶│ eval (PHP)  │────────▶│ manual   │
        │ --public=true│          │ deny attachment│          │ get_post_   │          │ baseline │
        │ --format=csv │          │ client-side    │          │ types()     │          │ + tokens │
        └──────┬───────┘          └───────┬────────┘          └──────┬──────┘          └────┬─────┘
               └──────────── ok ──────────┴───────── ok ─────────────┴──────── ok ──────────┘
                                                  ▼
                                          DiscoveryResult

Examples:
    >>> discovery = CategoryDiscovery(extra_categories=["case_study"])
    >>> result = discovery.discover(channel)
    >>> result.categories
    ('post', 'page', 'case_study')
    >>> result.strategy
    'unstructured'

Tags:
    discovery, fallback, chain-of-responsibility, wp-export

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from wpexport.core.errors import DiscoveryError
from wpexport.execution import commands
from wpexport.execution.channels import SESSION_TERMINATION_MARKERS, BaseChannel
from wpexport.execution.commands import WpCommand
from wpexport.framework.logging import get_logger, push_context

logger = get_logger(__name__)

BASELINE_CATEGORIES: tuple[str, ...] = ("post", "page")

DENIED_CATEGORIES: frozenset[str] = frozenset({"attachment"})

HEADER_TOKEN = "name"

# Raw output containing any of these means the strategy cannot be trusted.
FAILURE_MARKERS: tuple[str, ...] = SESSION_TERMINATION_MARKERS + ("Error:",)

# Lines from the transport rather than wp-cli.
_CHATTER_MARKERS: tuple[str, ...] = SESSION_TERMINATION_MARKERS + ("Connection",)


def dedupe(tokens: Iterable[str]) -> tuple[str, ...]:
    """Order-stable de-duplication."""
    return tuple(dict.fromkeys(tokens))


def validate_categories(lines: Iterable[str]) -> tuple[str, ...]:
    """Clean a raw category listing.

    Trims each line (CR included), drops empty lines, the ``name`` header,
    denied categories and transport chatter, then de-duplicates keeping the
    first occurrence.
    """
    cleaned = []
    for line in lines:
        token = line.replace("\r", "").strip().strip('"').strip()
        if not token or token == HEADER_TOKEN or token in DENIED_CATEGORIES:
            continue
        if any(marker in token for marker in _CHATTER_MARKERS):
            continue
        cleaned.append(token)
    return dedupe(cleaned)


def normalize_operator_tokens(tokens: Iterable[str]) -> tuple[str, ...]:
    """Trim operator-supplied tokens and remove commas; empties and repeats are dropped."""
    return dedupe(t for t in (token.replace(",", "").strip() for token in tokens) if t)


@dataclass(frozen=True)
class DiscoveryAttempt:
    """Outcome of one strategy."""

    strategy: str
    categories: tuple[str, ...] = ()
    error: DiscoveryError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.categories)

    @classmethod
    def ok(cls, strategy: str, categories: Sequence[str]) -> DiscoveryAttempt:
        return cls(strategy=strategy, categories=tuple(categories))

    @classmethod
    def fail(cls, strategy: str, reason: str, cause: Exception | None = None) -> DiscoveryAttempt:
        return cls(strategy=strategy, error=DiscoveryError(reason, cause=cause).with_context(strategy=strategy))


@dataclass(frozen=True)
class DiscoveryResult:
    """The run's category list and how it was obtained."""

    categories: tuple[str, ...]
    strategy: str
    attempts: tuple[DiscoveryAttempt, ...] = field(default_factory=tuple)
    used_baseline: bool = False

    @property
    def failed_strategies(self) -> list[str]:
        return [a.strategy for a in self.attempts if not a.succeeded]


# ── Strategies ───────────────────────────────────────────────────


class DiscoveryStrategy(ABC):
    """One link in the discovery chain."""

    name: str = ""

    @abstractmethod
    def attempt(self, channel: BaseChannel) -> DiscoveryAttempt:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class CommandStrategy(DiscoveryStrategy):
    """Run a wp-cli command and validate its output as one category per line."""

    def __init__(self, name: str, command: Callable[[], WpCommand]) -> None:
        self.name = name
        self._command = command

    def attempt(self, channel: BaseChannel) -> DiscoveryAttempt:
        command = self._command()
        result = channel.run(command)
        error = result.error(command.label)
        if error is not None:
            return DiscoveryAttempt.fail(self.name, error.message, cause=error)

        raw = result.text
        marker = next((m for m in FAILURE_MARKERS if m in raw), None)
        if marker is not None:
            return DiscoveryAttempt.fail(self.name, f"output contains {marker!r}")

        categories = validate_categories(raw.splitlines())
        if not categories:
            return DiscoveryAttempt.fail(self.name, "no usable categories in output")
        return DiscoveryAttempt.ok(self.name, categories)

    def __repr__(self) -> str:
        return f"CommandStrategy(name={self.name!r})"


class ManualStrategy(DiscoveryStrategy):
    """Baseline categories plus operator-supplied tokens.  Never touches the channel."""

    name = "manual"

    def __init__(self, extra_tokens: Iterable[str] = (), baseline: Sequence[str] = BASELINE_CATEGORIES) -> None:
        self.extra_tokens = normalize_operator_tokens(extra_tokens)
        self.baseline = tuple(baseline)

    def attempt(self, channel: BaseChannel) -> DiscoveryAttempt:
        categories = validate_categories((*self.baseline, *self.extra_tokens))
        if not categories:
            return DiscoveryAttempt.fail(self.name, "no baseline or operator categories")
        return DiscoveryAttempt.ok(self.name, categories)


def default_strategies() -> list[DiscoveryStrategy]:
    """The query strategies, in the order they are tried."""
    return [
        CommandStrategy("structured", commands.post_type_list_public),
        CommandStrategy("unstructured", commands.post_type_list),
        CommandStrategy("eval", commands.eval_public_post_types),
    ]


# ── Chain ────────────────────────────────────────────────────────


class CategoryDiscovery:
    """Run the strategy chain and return the first usable category list."""

    def __init__(
        self,
        strategies: Sequence[DiscoveryStrategy] | None = None,
        *,
        extra_categories: Iterable[str] = (),
        skip_discovery: bool = False,
    ) -> None:
        self.strategies = list(default_strategies() if strategies is None else strategies)
        self.manual = ManualStrategy(extra_categories)
        self.skip_discovery = skip_discovery

    @property
    def chain(self) -> list[DiscoveryStrategy]:
        if self.skip_discovery:
            return [self.manual]
        return [*self.strategies, self.manual]

    def discover(self, channel: BaseChannel) -> DiscoveryResult:
        attempts: list[DiscoveryAttempt] = []
        for strategy in self.chain:
            token = push_context(strategy=strategy.name)
            try:
                attempt = strategy.attempt(channel)
            finally:
                token.restore()
            attempts.append(attempt)

            if attempt.succeeded:
                logger.info(
                    "discovery.strategy.ok",
                    strategy=strategy.name,
                    categories=list(attempt.categories),
                )
                return DiscoveryResult(
                    categories=attempt.categories,
                    strategy=strategy.name,
                    attempts=tuple(attempts),
                )

            logger.warning(
                "discovery.strategy.failed",
                strategy=strategy.name,
                stage="discovery",
                reason=attempt.error.message if attempt.error else "empty",
            )

        logger.warning("discovery.exhausted", baseline=list(BASELINE_CATEGORIES))
        return DiscoveryResult(
            categories=BASELINE_CATEGORIES,
            strategy="baseline",
            attempts=tuple(attempts),
            used_baseline=True,
        )
