"""Substitute-component recommendations for detected functionalities.

Candidates come from the signature table. Each query:

1. filters the list when the page builder's pro tier is active and
   already covers (or partly covers) the functionality,
2. stamps every candidate with its installed/active state,
3. sorts active, then installed, then pro-native, then by
   compatibility score.
"""

from __future__ import annotations

import functools
import logging
from typing import Optional

from l2wp.core.preferences import PreferenceStore
from l2wp.errors import CollaboratorError, L2WPError
from l2wp.host.plugin_registry import PluginRegistry

from .models import Detection, SignatureMapping, SolutionCandidate

logger = logging.getLogger(__name__)

BUILDER_SLUG = "elementor"
PRO_SLUG = "elementor-pro"

# Pseudo-solutions that ship with the builder and need no installation
NATIVE_SLUGS: frozenset[str] = frozenset({BUILDER_SLUG, "custom_html", "custom_animations"})

# Functionalities the pro tier fully replaces: only builder-native candidates stay
PRO_REPLACES: frozenset[str] = frozenset({"popup_modal"})

# Functionalities the pro tier supplements: builder-native plus these slugs stay
PRO_SUPPLEMENTS: dict[str, tuple[str, ...]] = {
    "animations": ("insert-headers-and-footers", "custom_animations"),
}

GENERIC_CONVERSION = "generic_conversion"


def is_builder_native(candidate: SolutionCandidate) -> bool:
    return (
        candidate.slug in (PRO_SLUG, BUILDER_SLUG)
        or (candidate.is_native and BUILDER_SLUG in candidate.slug)
    )


class PluginRecommender:
    """Rank substitute components against the host's current state.

    Args:
        mapping: The signature table.
        registry: Host plugin registry; ``None`` treats every non-native
            slug as missing.
        preferences: Store of saved choices; ``None`` disables them.
        pro_active: Force the pro tier state. ``None`` asks the registry.
        pro_replaces / pro_supplements: Override the pro filter tables.
    """

    def __init__(
        self,
        mapping: Optional[SignatureMapping] = None,
        registry: Optional[PluginRegistry] = None,
        preferences: Optional[PreferenceStore] = None,
        pro_active: Optional[bool] = None,
        pro_replaces: Optional[frozenset[str]] = None,
        pro_supplements: Optional[dict[str, tuple[str, ...]]] = None,
    ):
        self.mapping: SignatureMapping = mapping or {}
        self.registry = registry
        self.preferences = preferences
        self._pro_override = pro_active
        self.pro_replaces = PRO_REPLACES if pro_replaces is None else frozenset(pro_replaces)
        self.pro_supplements = PRO_SUPPLEMENTS if pro_supplements is None else dict(pro_supplements)

    # ── Host state ──

    def is_pro_active(self) -> bool:
        if self._pro_override is not None:
            return self._pro_override
        return bool(self.registry and self.registry.pro_active())

    def _is_pro_defined(self) -> bool:
        if self._pro_override:
            return True
        return bool(self.registry and self.registry.pro_defined())

    def is_installed(self, slug: str) -> bool:
        if slug in NATIVE_SLUGS:
            return True
        if slug == PRO_SLUG:
            return self._is_pro_defined()
        return bool(self.registry and self.registry.is_installed(slug))

    def is_active(self, slug: str) -> bool:
        if slug in NATIVE_SLUGS:
            return True
        if slug == PRO_SLUG:
            return self.is_pro_active()
        return bool(self.registry and self.registry.is_active(slug))

    # ── Queries ──

    def filter_for_pro(self, key: str, solutions: list[SolutionCandidate]) -> list[SolutionCandidate]:
        """Drop candidates the active pro tier makes redundant.

        Never turns a non-empty list into an empty one.
        """
        if not self.is_pro_active():
            return solutions

        if key in self.pro_replaces:
            filtered = [s for s in solutions if is_builder_native(s)]
            if filtered:
                return filtered

        if key in self.pro_supplements:
            allowed = self.pro_supplements[key]
            filtered = [s for s in solutions if is_builder_native(s) or s.slug in allowed]
            if filtered:
                return filtered

        return solutions

    def _compare(self, a: SolutionCandidate, b: SolutionCandidate, pro_active: bool) -> int:
        if a.active != b.active:
            return -1 if a.active else 1
        if a.installed != b.installed:
            return -1 if a.installed else 1
        if pro_active:
            a_pro, b_pro = a.slug == PRO_SLUG, b.slug == PRO_SLUG
            if a_pro != b_pro:
                return -1 if a_pro else 1
        return b.compatibility - a.compatibility

    def get_solutions_for(self, key: str) -> list[SolutionCandidate]:
        """Filtered, status-stamped, sorted candidates. Unknown keys give ``[]``."""
        entry = self.mapping.get(key)
        if entry is None:
            return []

        solutions = self.filter_for_pro(key, entry.solutions)
        stamped = [s.with_status(self.is_installed(s.slug), self.is_active(s.slug)) for s in solutions]
        pro_active = self.is_pro_active()
        # sorted() is stable, so full ties keep table order
        return sorted(stamped, key=functools.cmp_to_key(lambda a, b: self._compare(a, b, pro_active)))

    def get_preferences(self) -> dict[str, str]:
        return self.preferences.load() if self.preferences else {}

    def save_preferences(self, preferences: dict[str, str]) -> None:
        if self.preferences is None:
            logger.debug("No preference store configured, not saving")
            return
        self.preferences.save(preferences)

    def clear_preferences(self) -> None:
        if self.preferences is not None:
            self.preferences.clear()

    def get_preferred_solution(self, key: str) -> Optional[SolutionCandidate]:
        solutions = self.get_solutions_for(key)
        preferred_slug = self.get_preferences().get(key)
        if preferred_slug:
            for solution in solutions:
                if solution.slug == preferred_slug:
                    return solution
        return solutions[0] if solutions else None

    def get_conversion_method(self, key: str, slug: str) -> str:
        for solution in self.get_solutions_for(key):
            if solution.slug == slug:
                return solution.conversion_method
        return GENERIC_CONVERSION

    def get_installation_stats(self, detections: dict[str, Detection]) -> dict[str, int]:
        stats = {
            "total_functionalities": len(detections),
            "plugins_needed": 0,
            "plugins_installed": 0,
            "plugins_active": 0,
            "native_solutions": 0,
        }
        for key in detections:
            preferred = self.get_preferred_solution(key)
            if preferred is None:
                continue
            if preferred.is_native:
                stats["native_solutions"] += 1
                continue
            stats["plugins_needed"] += 1
            if preferred.installed:
                stats["plugins_installed"] += 1
            if preferred.active:
                stats["plugins_active"] += 1
        return stats

    # ── Installation ──

    def _require_registry(self, slug: str) -> PluginRegistry:
        if self.registry is None:
            raise CollaboratorError(
                f"No plugin registry configured to handle '{slug}'", collaborator="registry"
            )
        return self.registry

    def install_plugin(self, slug: str) -> bool:
        """Install ``slug``. Native and already-installed slugs are no-ops.

        Raises:
            CollaboratorError: the registry reported a failure.
        """
        if slug in NATIVE_SLUGS or self.is_installed(slug):
            return True
        registry = self._require_registry(slug)
        try:
            registry.install(slug)
        except L2WPError:
            raise
        except Exception as e:
            raise CollaboratorError(str(e), collaborator=getattr(registry, "name", ""), cause=e) from e
        logger.info("Installed %s", slug)
        return True

    def activate_plugin(self, slug: str) -> bool:
        """Activate ``slug``. Native and already-active slugs are no-ops.

        Raises:
            CollaboratorError: the plugin is not installed or activation failed.
        """
        if slug in NATIVE_SLUGS or self.is_active(slug):
            return True
        registry = self._require_registry(slug)
        if not registry.is_installed(slug):
            raise CollaboratorError(
                "Plugin file not found", collaborator=getattr(registry, "name", ""), context={"slug": slug}
            )
        try:
            registry.activate(slug)
        except L2WPError:
            raise
        except Exception as e:
            raise CollaboratorError(str(e), collaborator=getattr(registry, "name", ""), cause=e) from e
        logger.info("Activated %s", slug)
        return True
