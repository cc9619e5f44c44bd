"""
Translation pipeline.

Turns a content tree (or plain text) into per-locale translated trees:
- flatten the tree into units, honouring skip rules and masking placeholders
- group plural families and expand/contract them per target locale
- send one batch per target locale to the backend, concurrently
- unmask, rebuild and collect warnings
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from translate_i18n_ai.errors import BackendError, BackendErrorCategory, ConfigurationError
from translate_i18n_ai.i18n.namespaces import NamespaceDetector
from translate_i18n_ai.i18n.paths import KeyPath, PathMatcher, format_path
from translate_i18n_ai.i18n.placeholders import PlaceholderMasker
from translate_i18n_ai.i18n.plurals import (
    CATEGORY_ORDER,
    DEFAULT_CATEGORIES,
    PluralExpansion,
    PluralFamily,
    PluralFamilyResolver,
    is_known_locale,
)
from translate_i18n_ai.i18n.tree import (
    PluralOutput,
    TranslationUnit,
    TreeFlattener,
    TreeRebuilder,
)
from translate_i18n_ai.translation.backend import BatchRequest, TranslationBackend
from translate_i18n_ai.translation.models import (
    SkippedKeys,
    TextTranslation,
    TranslationOptions,
    TranslationResult,
    TranslationWarning,
    WarningKind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Job:
    """One string to translate for one locale."""

    key_path: KeyPath
    unit: TranslationUnit
    plural_hint: str | None = None


def is_text_content(content: Any) -> bool:
    """Plain text mode: a string or a list made only of strings."""
    if isinstance(content, str):
        return True
    return isinstance(content, list) and all(isinstance(item, str) for item in content)


class TranslationPipeline:
    """
    Orchestrates one translation call across several target locales.

    The pipeline keeps no state between calls and can be shared.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        *,
        max_concurrent_locales: int = 4,
        masker: PlaceholderMasker | None = None,
        resolver: PluralFamilyResolver | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            backend: Backend receiving one batch per target locale.
            max_concurrent_locales: Locales translated at the same time.
            masker: Placeholder masker (default instance if None).
            resolver: Plural family resolver (default instance if None).
        """
        if max_concurrent_locales < 1:
            raise ConfigurationError("max_concurrent_locales must be at least 1")
        self._backend = backend
        self._max_concurrent = max_concurrent_locales
        self._masker = masker or PlaceholderMasker()
        self._resolver = resolver or PluralFamilyResolver()

    async def translate(
        self,
        content: Any,
        source_locale: str,
        target_locales: str | Sequence[str],
        options: TranslationOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TranslationResult:
        """
        Translate content into every target locale.

        Args:
            content: A JSON-like tree (dict or list), a string, or a list of strings.
            source_locale: Locale of the content.
            target_locales: One locale or a sequence of locales.
            options: TranslationOptions or a mapping of option values.
            **overrides: Individual option values (``skip_paths=[...]``).

        Returns:
            TranslationResult with one entry per target locale.

        Raises:
            ConfigurationError: Malformed options, locales or content.
            BackendError: A locale's backend call failed.
        """
        options = TranslationOptions.coerce(options, **overrides)
        targets = _validate_locales(source_locale, target_locales)

        if is_text_content(content):
            return await self._translate_text(content, source_locale, targets, options)
        if isinstance(content, Mapping | list):
            return await self._translate_tree(content, source_locale, targets, options)
        raise ConfigurationError(
            f"Content must be a dict, a list or a string, got {type(content).__name__}"
        )

    async def _translate_text(
        self,
        content: str | list[str],
        source_locale: str,
        targets: list[str],
        options: TranslationOptions,
    ) -> TranslationResult:
        texts = [content] if isinstance(content, str) else list(content)
        units = [self._make_unit((index,), text, options) for index, text in enumerate(texts)]
        jobs = [_Job(unit.key_path, unit) for unit in units]

        async def run(locale: str, warnings: list[TranslationWarning]) -> list[TextTranslation]:
            translated = await self._run_batch(jobs, source_locale, locale, options, warnings)
            return [
                TextTranslation(original=unit.source_text, translated=translated[unit.key_path])
                for unit in units
            ]

        per_language, warnings = await self._run_locales(targets, run)
        logger.info("Translated %d text(s) into %d locale(s)", len(texts), len(targets))
        return TranslationResult(per_language=per_language, warnings=warnings)

    async def _translate_tree(
        self,
        tree: Mapping[str, Any] | list[Any],
        source_locale: str,
        targets: list[str],
        options: TranslationOptions,
    ) -> TranslationResult:
        matcher = PathMatcher(options.skip_keys, options.skip_paths)
        flattener = TreeFlattener(
            matcher,
            self._masker if options.preserve_placeholders else None,
            enable_pluralization=options.enable_pluralization,
        )
        units, skipped_paths = flattener.flatten(tree)
        skipped = set(skipped_paths)

        families = self._resolver.group_families(units) if options.enable_pluralization else []
        family_of: dict[KeyPath, PluralFamily] = {
            unit.key_path: family for family in families for unit in family.source_forms.values()
        }

        namespace_info = NamespaceDetector(matcher).detect(tree) if options.detect_namespaces else None

        async def run(locale: str, warnings: list[TranslationWarning]) -> Any:
            expansions: dict[int, PluralExpansion] = {}
            jobs: list[_Job] = []

            for unit in units:
                family = family_of.get(unit.key_path)
                if family is None:
                    jobs.append(_Job(unit.key_path, unit))
                    continue
                if id(family) in expansions:
                    continue
                expansion = self._expand_family(family, source_locale, locale, skipped, warnings)
                expansions[id(family)] = expansion
                jobs.extend(_Job(f.key_path, f.template, f.category) for f in expansion.forms)

            if families and not is_known_locale(locale):
                warnings.append(
                    TranslationWarning(
                        message=(
                            f"No plural rules for locale '{locale}'; "
                            f"using {'/'.join(DEFAULT_CATEGORIES)}"
                        ),
                        locale=locale,
                        kind=WarningKind.PLURAL_LOCALE_UNKNOWN,
                    )
                )

            translated = await self._run_batch(jobs, source_locale, locale, options, warnings)

            plural_outputs: dict[KeyPath, PluralOutput] = {}
            for family in families:
                expansion = expansions[id(family)]
                output = PluralOutput(
                    entries=[(form.key, translated[form.key_path]) for form in expansion.forms]
                )
                for member in family.source_forms.values():
                    plural_outputs[member.key_path] = output

            return TreeRebuilder(skipped).rebuild(tree, translated, plural_outputs)

        per_language, warnings = await self._run_locales(targets, run)

        skipped_keys = tuple(dict.fromkeys(format_path(path) for path in skipped_paths))
        logger.info(
            "Translated %d key(s) into %d locale(s), %d skipped, %d plural famil%s",
            len(units),
            len(targets),
            len(skipped_keys),
            len(families),
            "y" if len(families) == 1 else "ies",
        )
        return TranslationResult(
            per_language=per_language,
            skipped=SkippedKeys(keys=skipped_keys),
            warnings=warnings,
            namespace_info=namespace_info,
        )

    def _expand_family(
        self,
        family: PluralFamily,
        source_locale: str,
        target_locale: str,
        skipped: set[KeyPath],
        warnings: list[TranslationWarning],
    ) -> PluralExpansion:
        covered = [c for c in CATEGORY_ORDER if family.path_for(c) in skipped]
        expansion = self._resolver.expand(family, source_locale, target_locale, covered=covered)
        for category in expansion.dropped:
            warnings.append(
                TranslationWarning(
                    message=(
                        f"Plural category '{category}' is not used by '{target_locale}'; "
                        f"'{family.key_for(category)}' was dropped"
                    ),
                    key_path=format_path(family.path_for(category)),
                    locale=target_locale,
                    kind=WarningKind.PLURAL_CATEGORY_DROPPED,
                )
            )
        return expansion

    def _make_unit(self, key_path: KeyPath, text: str, options: TranslationOptions) -> TranslationUnit:
        if not options.preserve_placeholders:
            return TranslationUnit(key_path, text, text)
        masked = self._masker.mask(text)
        return TranslationUnit(key_path, text, masked.text, masked.placeholders)

    async def _run_locales(
        self,
        targets: list[str],
        run: Callable[[str, list[TranslationWarning]], Awaitable[Any]],
    ) -> tuple[dict[str, Any], tuple[TranslationWarning, ...]]:
        """
        Run ``run(locale, warnings)`` for every locale concurrently.

        Every locale is allowed to finish; afterwards the first failure in
        target order is raised.
        """
        semaphore = asyncio.Semaphore(self._max_concurrent)
        locale_warnings: dict[str, list[TranslationWarning]] = {t: [] for t in targets}

        async def guarded(locale: str) -> Any:
            async with semaphore:
                return await run(locale, locale_warnings[locale])

        outcomes = await asyncio.gather(*(guarded(t) for t in targets), return_exceptions=True)

        failures = [(t, o) for t, o in zip(targets, outcomes) if isinstance(o, BaseException)]
        if failures:
            for locale, error in failures[1:]:
                logger.error("Translation to %s also failed: %s", locale, error)
            raise failures[0][1]

        per_language = dict(zip(targets, outcomes))
        warnings = tuple(w for t in targets for w in locale_warnings[t])
        return per_language, warnings

    async def _run_batch(
        self,
        jobs: list[_Job],
        source_locale: str,
        target_locale: str,
        options: TranslationOptions,
        warnings: list[TranslationWarning],
    ) -> dict[KeyPath, str]:
        """Send one batch for ``target_locale`` and return unmasked text per key path."""
        results: dict[KeyPath, str] = {}
        pending: list[_Job] = []
        for job in jobs:
            if job.unit.source_text.strip():
                pending.append(job)
            else:
                results[job.key_path] = job.unit.source_text

        if not pending:
            return results

        request = BatchRequest(
            source_locale=source_locale,
            target_locale=target_locale,
            texts=tuple(job.unit.masked_text for job in pending),
            plural_hints=tuple(job.plural_hint for job in pending),
            preserve_placeholders=options.preserve_placeholders,
            enable_pluralization=options.enable_pluralization,
        )
        logger.debug("Sending %d string(s) for %s -> %s", len(request), source_locale, target_locale)

        try:
            translated = await self._backend.translate(request)
        except BackendError as e:
            logger.error("Backend failed for %s: %s", target_locale, e.message)
            raise e.with_locale(target_locale) from e
        except Exception as e:
            logger.error("Backend failed for %s: %s", target_locale, e)
            raise BackendError(
                str(e) or type(e).__name__,
                status_category=BackendErrorCategory.UNKNOWN,
                locale=target_locale,
            ) from e

        if len(translated) != len(pending):
            raise BackendError(
                f"Backend returned {len(translated)} translations for {len(pending)} strings",
                status_category=BackendErrorCategory.MALFORMED_RESPONSE,
                code="LENGTH_MISMATCH",
                locale=target_locale,
            )

        for job, text in zip(pending, translated):
            if not options.preserve_placeholders:
                results[job.key_path] = text
                continue
            restored = self._masker.restore(text, job.unit.placeholders)
            if not restored.ok:
                path = format_path(job.key_path)
                logger.warning(
                    "Placeholder drift in %s for %s (missing %s, unexpected %s)",
                    path,
                    target_locale,
                    list(restored.missing),
                    list(restored.unexpected),
                )
                warnings.append(
                    TranslationWarning(
                        message=_describe_drift(job.unit, restored.missing, restored.unexpected),
                        key_path=path,
                        locale=target_locale,
                        kind=WarningKind.PLACEHOLDER_MISMATCH,
                    )
                )
            results[job.key_path] = restored.text

        return results


def _describe_drift(
    unit: TranslationUnit,
    missing: tuple[int, ...],
    unexpected: tuple[str, ...],
) -> str:
    parts = []
    if missing:
        tokens = ", ".join(unit.placeholders[i].token for i in missing)
        parts.append(f"Placeholder(s) {tokens} could not be restored")
    if unexpected:
        parts.append(f"Unexpected marker(s) {', '.join(unexpected)} in translation")
    return "; ".join(parts)


def _validate_locales(source_locale: str, target_locales: str | Sequence[str]) -> list[str]:
    if not isinstance(source_locale, str) or not source_locale.strip():
        raise ConfigurationError("source_locale must be a non-empty string")

    if isinstance(target_locales, str):
        target_locales = [target_locales]
    targets = []
    for locale in target_locales:
        if not isinstance(locale, str) or not locale.strip():
            raise ConfigurationError(f"Invalid target locale: {locale!r}")
        targets.append(locale.strip())

    targets = list(dict.fromkeys(targets))
    if not targets:
        raise ConfigurationError("At least one target locale is required")
    return targets
