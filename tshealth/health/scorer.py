"""Additive health scoring rule.

Maintainability, complexity, difficulty and function count each contribute
points; when a dependency profile is available its fan-out, depth, cycles and
fan-in adjust the total. The total maps onto a :class:`HealthLevel`.
"""

from tshealth.health.models import DependencyProfile, FileMetrics, HealthLevel


def calculate_health_points(
    metrics: FileMetrics,
    profile: DependencyProfile | None = None,
) -> int:
    """Compute the additive health score for one file.

    Args:
        metrics: Aggregate file metrics
        profile: Optional dependency profile of the file

    Returns:
        Integer point total (may be negative)
    """
    points = 0

    if metrics.maintainability > 85:
        points += 3
    elif metrics.maintainability > 65:
        points += 2
    elif metrics.maintainability > 50:
        points += 1

    if metrics.complexity < 5:
        points += 3
    elif metrics.complexity < 10:
        points += 2
    elif metrics.complexity < 20:
        points += 1

    if metrics.difficulty < 10:
        points += 2
    elif metrics.difficulty < 20:
        points += 1

    if metrics.function_count < 5:
        points += 1
    elif metrics.function_count > 20:
        points -= 1

    if profile is not None:
        if profile.dependency_count < 5:
            points += 1
        elif profile.dependency_count > 15:
            points -= 1

        if profile.depth < 3:
            points += 1
        elif profile.depth > 6:
            points -= 1

        if profile.has_circular_dependencies:
            points -= 2

        # Widely imported files are load-bearing, not a smell
        if profile.dependent_count > 10:
            points += 1

    return points


def calculate_health_level(
    metrics: FileMetrics,
    profile: DependencyProfile | None = None,
) -> HealthLevel:
    """Classify a file into a health tier."""
    return HealthLevel.from_points(calculate_health_points(metrics, profile))
