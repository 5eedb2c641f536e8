"""
Strategy Planner

Turns a prioritized recommendation list into an implementation strategy:
- Phased timeline (quick wins, core improvements, advanced optimization)
- Resource allocation (time, technical, content, cost) by priority,
  category and phase
- Monthly ROI projection with break-even month
- Strategy map (recommendation/category graph for visualization)

Usage:
    from competitor_intel.services.strategy_planner import StrategyPlanner

    planner = StrategyPlanner(timeline_months=6)
    strategy = planner.plan(recommendations)

    for phase in strategy.timeline.phases:
        print(phase.name, len(phase.tasks))
"""

import math
from datetime import date, timedelta
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field

from runner.logging_setup import get_logger
from competitor_intel.config import (
    ENABLE_ROI_PROJECTION,
    PHASES,
    RESOURCE_CATEGORIES,
    TIMELINE_MONTHS,
)
from competitor_intel.models import (
    PRIORITIES,
    Recommendation,
    priority_for_impact,
)
from competitor_intel.utils import add_months, to_iso


# =============================================================================
# ESTIMATION TABLES (unverified tuning)
# =============================================================================

BASE_DURATION_DAYS = {"critical": 2, "high": 3, "medium": 5, "low": 7}
DEFAULT_DURATION_DAYS = 5
EXTENDED_DURATION_CATEGORIES = ("Content", "Technical SEO")
EXTENDED_DURATION_DAYS = 2

BASE_RESOURCES = {
    "critical": {"time": 16, "cost": 2000},
    "high": {"time": 12, "cost": 1500},
    "medium": {"time": 8, "cost": 1000},
    "low": {"time": 4, "cost": 500},
}
HOURS_PER_ACTION = 2
COST_PER_ACTION = 100

TECHNICAL_UNITS = {"Technical SEO": 3, "Performance": 2, "Mobile": 2}
CONTENT_UNITS = {"Content": 3, "Keywords": 3, "On-Page SEO": 2}
DEFAULT_UNITS = 1

IMPACT_VALUE_PER_POINT = 200
PRIORITY_MULTIPLIERS = {"critical": 2.0, "high": 1.5, "medium": 1.0, "low": 0.5}
BOOSTED_CATEGORIES = ("Performance", "Technical SEO")
CATEGORY_BOOST = 1.2
RETURN_MULTIPLIER = 1.5


def _priority_value(rec: Recommendation) -> str:
    priority = rec.priority or priority_for_impact(rec.impact_score)
    return priority.value


def task_duration(rec: Recommendation) -> int:
    """Estimated working days for a recommendation."""
    days = BASE_DURATION_DAYS.get(_priority_value(rec), DEFAULT_DURATION_DAYS)
    days += math.ceil(len(rec.actions) / 2)
    if rec.category in EXTENDED_DURATION_CATEGORIES:
        days += EXTENDED_DURATION_DAYS
    return days


def estimate_resources(rec: Recommendation) -> Dict[str, float]:
    """Resource needs for a recommendation over RESOURCE_CATEGORIES."""
    base = BASE_RESOURCES[_priority_value(rec)]
    actions = len(rec.actions)
    return {
        "time": base["time"] + actions * HOURS_PER_ACTION,
        "technical": TECHNICAL_UNITS.get(rec.category, DEFAULT_UNITS),
        "content": CONTENT_UNITS.get(rec.category, DEFAULT_UNITS),
        "cost": base["cost"] + actions * COST_PER_ACTION,
    }


def monthly_impact(rec: Recommendation) -> float:
    """Projected monthly value once a recommendation is implemented."""
    impact = rec.impact_score * IMPACT_VALUE_PER_POINT * PRIORITY_MULTIPLIERS[_priority_value(rec)]
    if rec.category in BOOSTED_CATEGORIES:
        impact *= CATEGORY_BOOST
    return impact


def _empty_allocation() -> Dict[str, float]:
    return {axis: 0 for axis in RESOURCE_CATEGORIES}


def _slug(text: str) -> str:
    return "-".join(text.lower().split())


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class Task:
    id: str
    name: str
    priority: str
    category: str
    start: date
    end: date
    duration: int
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "priority": self.priority,
            "category": self.category,
            "start": to_iso(self.start),
            "end": to_iso(self.end),
            "duration": self.duration,
            "dependencies": list(self.dependencies),
        }


@dataclass
class Phase:
    name: str
    start_date: date
    end_date: date
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
            "tasks": [task.to_dict() for task in self.tasks],
        }


@dataclass
class Timeline:
    start_date: date
    end_date: date
    phases: List[Phase] = field(default_factory=list)

    def tasks(self) -> List[Task]:
        return [task for phase in self.phases for task in phase.tasks]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
            "phases": [phase.to_dict() for phase in self.phases],
        }


@dataclass
class ResourceAllocation:
    """Resource totals plus breakdowns by priority, category and phase."""
    total: Dict[str, float] = field(default_factory=_empty_allocation)
    by_priority: Dict[str, Dict[str, float]] = field(default_factory=dict)
    by_category: Dict[str, Dict[str, float]] = field(default_factory=dict)
    by_phase: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def resources(self) -> List[Dict[str, Any]]:
        """Flat list for charting."""
        entries = [
            {"name": f"{priority.capitalize()} Priority", "type": "priority", "allocations": dict(values)}
            for priority, values in self.by_priority.items()
        ]
        entries.extend(
            {"name": category, "type": "category", "allocations": dict(values)}
            for category, values in self.by_category.items()
        )
        entries.extend(
            {"name": phase, "type": "phase", "allocations": dict(values)}
            for phase, values in self.by_phase.items()
        )
        return entries

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": dict(self.total),
            "byPriority": {key: dict(values) for key, values in self.by_priority.items()},
            "byCategory": {key: dict(values) for key, values in self.by_category.items()},
            "byPhase": {key: dict(values) for key, values in self.by_phase.items()},
            "resources": self.resources(),
        }


@dataclass
class RoiProjection:
    """Monthly investment vs return; cumulativeRoi is a percentage."""
    months: List[date] = field(default_factory=list)
    investment: List[float] = field(default_factory=list)
    returns: List[float] = field(default_factory=list)
    cumulative_roi: List[float] = field(default_factory=list)
    break_even_month: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "months": [to_iso(month) for month in self.months],
            "investment": [round(value, 2) for value in self.investment],
            "return": [round(value, 2) for value in self.returns],
            "cumulativeRoi": [round(value, 2) for value in self.cumulative_roi],
            "breakEvenMonth": to_iso(self.break_even_month) if self.break_even_month else None,
        }


@dataclass
class MapNode:
    id: str
    name: str
    type: str
    impact: float
    category: Optional[str] = None
    priority: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"id": self.id, "name": self.name, "type": self.type, "impact": round(self.impact, 2)}
        if self.category is not None:
            result["category"] = self.category
        if self.priority is not None:
            result["priority"] = self.priority
        return result


@dataclass
class MapLink:
    source: str
    target: str
    value: float
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "target": self.target, "value": round(self.value, 2), "type": self.type}


@dataclass
class StrategyMap:
    nodes: List[MapNode] = field(default_factory=list)
    links: List[MapLink] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


@dataclass
class Strategy:
    """Complete implementation strategy for one analysis."""
    recommendations: List[Recommendation]
    timeline: Timeline
    resource_allocation: ResourceAllocation
    roi_projection: Optional[RoiProjection]
    strategy_map: StrategyMap
    unscheduled: List[Recommendation] = field(default_factory=list)

    def all_recommendations(self) -> List[Recommendation]:
        """Every recommendation, including those that did not fit the timeline."""
        return list(self.recommendations)

    def recommendations_by_priority(self) -> Dict[str, List[Recommendation]]:
        grouped = {priority: [] for priority in PRIORITIES}
        for rec in self.recommendations:
            grouped[_priority_value(rec)].append(rec)
        return grouped

    def recommendations_by_category(self) -> Dict[str, List[Recommendation]]:
        grouped: Dict[str, List[Recommendation]] = {}
        for rec in self.recommendations:
            grouped.setdefault(rec.category, []).append(rec)
        return grouped

    def impact_by_category(self) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for rec in self.recommendations:
            totals[rec.category] = totals.get(rec.category, 0.0) + rec.impact_score
        return totals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "timeline": self.timeline.to_dict(),
            "resourceAllocation": self.resource_allocation.to_dict(),
            "roiProjection": self.roi_projection.to_dict() if self.roi_projection else None,
            "strategyMap": self.strategy_map.to_dict(),
        }


class StrategyPlanner:
    """
    Builds a phased plan from prioritized recommendations.

    Recommendations are expected in impact order (as produced by the
    merger). Each lands in the first phase accepting its priority that still
    has room; overflow goes to the last phase, and anything beyond that stays
    in the recommendation list without a task.
    """

    def __init__(self, timeline_months: int = TIMELINE_MONTHS, enable_roi_projection: bool = ENABLE_ROI_PROJECTION):
        self.logger = get_logger("StrategyPlanner")
        self.timeline_months = timeline_months
        self.enable_roi_projection = enable_roi_projection
        self.phase_table = PHASES

    def plan(self, recommendations: List[Recommendation], start_date: Optional[date] = None) -> Strategy:
        """
        Build the strategy.

        Args:
            recommendations: Prioritized recommendations
            start_date: First day of the plan (default: today)

        Returns:
            Strategy
        """
        start_date = start_date or date.today()
        recommendations = list(recommendations)

        self.logger.info(f"Generating strategy for {len(recommendations)} recommendations")

        timeline, unscheduled = self._build_timeline(recommendations, start_date)
        allocation = self._allocate_resources(recommendations, timeline)
        roi = self._project_roi(recommendations, timeline) if self.enable_roi_projection else None
        strategy_map = self._build_strategy_map(recommendations)

        if unscheduled:
            self.logger.warning(f"{len(unscheduled)} recommendations did not fit the timeline")

        return Strategy(
            recommendations=recommendations,
            timeline=timeline,
            resource_allocation=allocation,
            roi_projection=roi,
            strategy_map=strategy_map,
            unscheduled=unscheduled,
        )

    # =========================================================================
    # Timeline
    # =========================================================================

    def _build_timeline(self, recommendations: List[Recommendation], start_date: date):
        timeline = Timeline(start_date=start_date, end_date=add_months(start_date, self.timeline_months))

        offset = 0
        for definition in self.phase_table:
            first_month = min(offset, self.timeline_months)
            last_month = min(offset + definition["duration_months"], self.timeline_months)
            timeline.phases.append(Phase(
                name=definition["name"],
                start_date=add_months(start_date, first_month),
                end_date=add_months(start_date, last_month),
            ))
            offset += definition["duration_months"]

        assigned: List[List[Recommendation]] = [[] for _ in self.phase_table]
        unscheduled = []
        for rec in recommendations:
            index = self._phase_for(rec, assigned)
            if index is None:
                unscheduled.append(rec)
            else:
                assigned[index].append(rec)

        for phase, members in zip(timeline.phases, assigned):
            phase_days = (phase.end_date - phase.start_date).days
            for position, rec in enumerate(members):
                task_start = phase.start_date + timedelta(days=round(position * phase_days / len(members)))
                duration = task_duration(rec)
                phase.tasks.append(Task(
                    id=f"task-{len(phase.tasks) + 1}",
                    name=rec.title,
                    priority=_priority_value(rec),
                    category=rec.category,
                    start=task_start,
                    end=min(task_start + timedelta(days=duration), phase.end_date),
                    duration=duration,
                ))
            self.logger.info(f"{phase.name}: {len(phase.tasks)} tasks ({to_iso(phase.start_date)} to {to_iso(phase.end_date)})")

        return timeline, unscheduled

    def _phase_for(self, rec: Recommendation, assigned: List[List[Recommendation]]) -> Optional[int]:
        priority = _priority_value(rec)
        for index, definition in enumerate(self.phase_table):
            if priority in definition["priorities"] and len(assigned[index]) < definition["max_tasks"]:
                return index

        last = len(self.phase_table) - 1
        if len(assigned[last]) < self.phase_table[last]["max_tasks"]:
            return last
        return None

    # =========================================================================
    # Resources
    # =========================================================================

    def _allocate_resources(self, recommendations: List[Recommendation], timeline: Timeline) -> ResourceAllocation:
        allocation = ResourceAllocation(
            by_priority={priority: _empty_allocation() for priority in PRIORITIES},
            by_phase={phase.name: _empty_allocation() for phase in timeline.phases},
        )

        phase_by_task = {}
        for phase in timeline.phases:
            for task in phase.tasks:
                phase_by_task.setdefault(task.name, phase.name)

        for rec in recommendations:
            needs = estimate_resources(rec)
            buckets = [
                allocation.total,
                allocation.by_priority[_priority_value(rec)],
                allocation.by_category.setdefault(rec.category, _empty_allocation()),
            ]
            if rec.title in phase_by_task:
                buckets.append(allocation.by_phase[phase_by_task[rec.title]])
            for bucket in buckets:
                for axis in RESOURCE_CATEGORIES:
                    bucket[axis] += needs[axis]

        return allocation

    # =========================================================================
    # ROI
    # =========================================================================

    def _project_roi(self, recommendations: List[Recommendation], timeline: Timeline) -> RoiProjection:
        months = []
        current = timeline.start_date
        while current <= timeline.end_date:
            months.append(current)
            current = add_months(timeline.start_date, len(months))

        investment = [0.0] * len(months)
        returns = [0.0] * len(months)

        def month_index(value: date) -> Optional[int]:
            for index, month in enumerate(months):
                if (month.year, month.month) == (value.year, value.month):
                    return index
            return None

        by_title = {}
        for rec in recommendations:
            by_title.setdefault(rec.title, rec)

        for task in timeline.tasks():
            rec = by_title.get(task.name)
            start_index, end_index = month_index(task.start), month_index(task.end)
            if rec is None or start_index is None or end_index is None:
                continue

            span = end_index - start_index + 1
            cost = estimate_resources(rec)["cost"]
            for index in range(start_index, end_index + 1):
                investment[index] += cost / span

            value = monthly_impact(rec) * RETURN_MULTIPLIER
            for index in range(end_index + 1, len(months)):
                returns[index] += value

        cumulative_roi = []
        total_investment = 0.0
        total_return = 0.0
        for spent, earned in zip(investment, returns):
            total_investment += spent
            total_return += earned
            if total_investment > 0:
                cumulative_roi.append((total_return - total_investment) / total_investment * 100)
            else:
                cumulative_roi.append(0.0)

        break_even = next((month for month, roi in zip(months, cumulative_roi) if roi > 0), None)

        return RoiProjection(
            months=months,
            investment=investment,
            returns=returns,
            cumulative_roi=cumulative_roi,
            break_even_month=break_even,
        )

    # =========================================================================
    # Strategy map
    # =========================================================================

    def _build_strategy_map(self, recommendations: List[Recommendation]) -> StrategyMap:
        strategy_map = StrategyMap()
        category_nodes: Dict[str, MapNode] = {}

        for index, rec in enumerate(recommendations):
            rec_id = f"rec-{index}"
            strategy_map.nodes.append(MapNode(
                id=rec_id,
                name=rec.title,
                type="recommendation",
                impact=rec.impact_score,
                category=rec.category,
                priority=_priority_value(rec),
            ))

            category_node = category_nodes.get(rec.category)
            if category_node is None:
                category_node = MapNode(id=f"cat-{_slug(rec.category)}", name=rec.category, type="category", impact=0.0)
                category_nodes[rec.category] = category_node
                strategy_map.nodes.append(category_node)
            category_node.impact += rec.impact_score

            strategy_map.links.append(MapLink(
                source=rec_id,
                target=category_node.id,
                value=rec.impact_score,
                type="recommendation-category",
            ))

        for index, rec in enumerate(recommendations):
            related = set(rec.related_items)
            if not related:
                continue
            for other_index in range(index + 1, len(recommendations)):
                if related & set(recommendations[other_index].related_items):
                    strategy_map.links.append(MapLink(
                        source=f"rec-{index}",
                        target=f"rec-{other_index}",
                        value=1,
                        type="recommendation-recommendation",
                    ))

        return strategy_map


# Module-level singleton
_strategy_planner_instance = None


def get_strategy_planner() -> StrategyPlanner:
    """Get or create the singleton StrategyPlanner instance."""
    global _strategy_planner_instance
    if _strategy_planner_instance is None:
        _strategy_planner_instance = StrategyPlanner()
    return _strategy_planner_instance
