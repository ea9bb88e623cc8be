"""
Route selection classifier.

Pure functions that describe how a set of selected flights relates to a
rotation's leg structure, and which legs should move to keep the fewest
chain breaks.
"""

from typing import Iterable, List, Optional

from ..models.analysis import RouteAnalysisModel, RecommendedOptionModel
from ..models.enums import RouteClassification
from ..models.rotation import RotationModel


def _is_contiguous(sequences: List[int]) -> bool:
    return all(seq == sequences[i - 1] + 1 for i, seq in enumerate(sequences) if i > 0)


def classify_route_selection(
    rotation: RotationModel,
    selected_flight_ids: Iterable[str]
) -> RouteAnalysisModel:
    """
    Classify a selection against one rotation.

    Only legs tied to a selected flight count as selected. Rules, in order:
    empty selection is NO_ROUTE, every leg selected is FULL_ROUTE, a gap in
    the selected sequences is SCATTERED; a contiguous selection touching
    the first leg is HEAD_SPLIT, touching the last leg TAIL_SPLIT, and
    anything else MIDDLE_EXTRACT.

    Args:
        rotation: Rotation with its legs
        selected_flight_ids: Underlying flight ids of the selection

    Returns:
        RouteAnalysisModel describing the selection
    """
    selected = set(selected_flight_ids)
    all_seqs = [leg.leg_sequence for leg in rotation.legs]
    selected_seqs = sorted(
        leg.leg_sequence for leg in rotation.legs
        if leg.flight_id and leg.flight_id in selected
    )

    def analysis(classification: RouteClassification, is_full: bool = False) -> RouteAnalysisModel:
        return RouteAnalysisModel(
            route_id=rotation.id,
            rotation=rotation,
            classification=classification,
            selected_leg_sequences=selected_seqs,
            all_leg_sequences=all_seqs,
            is_full_route=is_full,
        )

    if not selected_seqs:
        return analysis(RouteClassification.NO_ROUTE)

    if len(selected_seqs) == len(all_seqs):
        return analysis(RouteClassification.FULL_ROUTE, is_full=True)

    if not _is_contiguous(selected_seqs):
        return analysis(RouteClassification.SCATTERED)

    if selected_seqs[0] == min(all_seqs):
        return analysis(RouteClassification.HEAD_SPLIT)
    if selected_seqs[-1] == max(all_seqs):
        return analysis(RouteClassification.TAIL_SPLIT)
    return analysis(RouteClassification.MIDDLE_EXTRACT)


def get_recommended_option(
    classification: RouteClassification,
    all_seqs: List[int],
    selected_seqs: List[int]
) -> Optional[RecommendedOptionModel]:
    """
    Suggest which legs to move for a partial selection.

    MIDDLE_EXTRACT moves the selection together with every later leg,
    SCATTERED moves the contiguous block spanning the selection, and
    HEAD_SPLIT / TAIL_SPLIT move the selection as is. FULL_ROUTE and
    NO_ROUTE have nothing to recommend.
    """
    if classification in (RouteClassification.FULL_ROUTE, RouteClassification.NO_ROUTE):
        return None

    if classification == RouteClassification.MIDDLE_EXTRACT:
        min_selected = min(selected_seqs)
        moved = [s for s in all_seqs if s >= min_selected]
        return RecommendedOptionModel(
            label="Move selected + trailing legs",
            description=f"Move leg {min_selected} onward ({len(moved)} legs), fewest chain breaks",
            moved_sequences=moved,
        )

    if classification == RouteClassification.SCATTERED:
        min_selected, max_selected = min(selected_seqs), max(selected_seqs)
        moved = [s for s in all_seqs if min_selected <= s <= max_selected]
        return RecommendedOptionModel(
            label="Move contiguous block",
            description=f"Move legs {min_selected}-{max_selected} ({len(moved)} legs)",
            moved_sequences=moved,
        )

    count = len(selected_seqs)
    return RecommendedOptionModel(
        label="Split trailing legs" if classification == RouteClassification.TAIL_SPLIT else "Split leading legs",
        description=f"Move {count} leg{'s' if count > 1 else ''}",
        moved_sequences=list(selected_seqs),
    )


def recommend_for(analysis: RouteAnalysisModel) -> Optional[RecommendedOptionModel]:
    """Convenience wrapper taking a RouteAnalysisModel."""
    return get_recommended_option(
        analysis.classification,
        analysis.all_leg_sequences,
        analysis.selected_leg_sequences,
    )
