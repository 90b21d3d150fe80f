"""Recommendation commands: recommend, signatures."""
from __future__ import annotations

from l2wp import ui
from l2wp.core.config_service import get_config_service
from l2wp.core.preferences import PreferenceStore
from l2wp.detection.models import SignatureMapping
from l2wp.detection.recommender import PluginRecommender
from l2wp.detection.signatures import load_signatures
from l2wp.errors import NotFoundError
from l2wp.host import get_plugin_registry


def _mapping() -> SignatureMapping:
    return load_signatures(get_config_service().get_signatures_path())


def build_recommender(mapping: SignatureMapping) -> PluginRecommender:
    config_svc = get_config_service()
    return PluginRecommender(
        mapping,
        registry=get_plugin_registry(),
        preferences=PreferenceStore.in_dir(config_svc.get_data_dir()),
        pro_active=config_svc.get_pro_override(),
    )


def recommend(key: str) -> None:
    mapping = _mapping()
    if key not in mapping:
        raise NotFoundError("functionality", key, available=sorted(mapping))

    recommender = build_recommender(mapping)
    solutions = recommender.get_solutions_for(key)
    preferred = recommender.get_preferred_solution(key)

    if ui.is_json():
        ui.print_json_output({
            "key": key,
            "pro_active": recommender.is_pro_active(),
            "preferred": preferred.slug if preferred else None,
            "solutions": [s.to_dict() for s in solutions],
        })
        return

    rows = []
    for solution in solutions:
        marker = ui.icon("complete") if preferred and solution.slug == preferred.slug else ""
        rows.append([
            solution.slug,
            solution.name,
            solution.type,
            solution.pricing,
            solution.compatibility,
            ui.solution_status_icon(solution.installed, solution.active),
            marker,
        ])
    title = f"{mapping[key].name} ({key})"
    ui.console.print(ui.simple_table(
        title, ["Slug", "Name", "Type", "Pricing", "Compat.", "Status", "Preferred"], rows,
    ))
    if recommender.is_pro_active():
        ui.console.print("[muted]Builder pro tier is active; redundant candidates are hidden.[/muted]")


def list_signatures() -> None:
    mapping = _mapping()
    if ui.is_json():
        ui.print_json_output({
            key: {
                "name": entry.name,
                "patterns": entry.patterns,
                "solutions": [s.slug for s in entry.solutions],
            }
            for key, entry in mapping.items()
        })
        return
    rows = [
        [key, entry.name, len(entry.patterns), ", ".join(s.slug for s in entry.solutions)]
        for key, entry in mapping.items()
    ]
    ui.console.print(ui.simple_table("Functionality Signatures", ["Key", "Name", "Patterns", "Solutions"], rows))
