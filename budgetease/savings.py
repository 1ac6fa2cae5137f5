"""Savings goals, budget recommendations and reward tiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

PROFILE_TYPES = {
    'PERSONAL': 'personal',
    'BUSINESS': 'business',
    'SAVINGS': 'savings',
    'INVESTMENT': 'investment',
    'STUDENT': 'student',
}

SAVING_GOALS = {
    'EMERGENCY': 'emergency',
    'HOUSE': 'house',
    'CAR': 'car',
    'EDUCATION': 'education',
    'RETIREMENT': 'retirement',
    'VACATION': 'vacation',
    'WEDDING': 'wedding',
    'BUSINESS': 'business',
    'OTHER': 'other',
}

RISK_TOLERANCE_LEVELS = {
    'CONSERVATIVE': 'conservative',
    'MODERATE': 'moderate',
    'AGGRESSIVE': 'aggressive',
}

BUDGET_INTERVALS = {
    'DAILY': 'daily',
    'WEEKLY': 'weekly',
    'MONTHLY': 'monthly',
    'YEARLY': 'yearly',
}

EXPENSE_CATEGORIES: Dict[str, Dict[str, object]] = {
    'HOUSING': {
        'id': 'housing',
        'name': 'Housing',
        'icon': 'home',
        'color': '#4CAF50',
        'subcategories': ['Rent', 'Mortgage', 'Utilities', 'Insurance', 'Maintenance'],
    },
    'TRANSPORTATION': {
        'id': 'transportation',
        'name': 'Transportation',
        'icon': 'directions-car',
        'color': '#2196F3',
        'subcategories': ['Car Payment', 'Gas', 'Public Transit', 'Maintenance', 'Insurance'],
    },
    'FOOD': {
        'id': 'food',
        'name': 'Food',
        'icon': 'restaurant',
        'color': '#FF9800',
        'subcategories': ['Groceries', 'Dining Out', 'Delivery', 'Snacks'],
    },
    'ENTERTAINMENT': {
        'id': 'entertainment',
        'name': 'Entertainment',
        'icon': 'local-movies',
        'color': '#9C27B0',
        'subcategories': ['Movies', 'Games', 'Sports', 'Hobbies', 'Streaming Services'],
    },
    'SHOPPING': {
        'id': 'shopping',
        'name': 'Shopping',
        'icon': 'shopping-bag',
        'color': '#F44336',
        'subcategories': ['Clothing', 'Electronics', 'Home Goods', 'Personal Care'],
    },
    'HEALTH': {
        'id': 'health',
        'name': 'Health',
        'icon': 'healing',
        'color': '#00BCD4',
        'subcategories': ['Insurance', 'Medications', 'Doctor Visits', 'Gym'],
    },
    'EDUCATION': {
        'id': 'education',
        'name': 'Education',
        'icon': 'school',
        'color': '#795548',
        'subcategories': ['Tuition', 'Books', 'Supplies', 'Courses'],
    },
    'SAVINGS': {
        'id': 'savings',
        'name': 'Savings',
        'icon': 'savings',
        'color': '#607D8B',
        'subcategories': ['Emergency Fund', 'Retirement', 'Investments', 'Goals'],
    },
}

SAVING_RATES = {
    RISK_TOLERANCE_LEVELS['CONSERVATIVE']: 0.15,
    RISK_TOLERANCE_LEVELS['MODERATE']: 0.25,
    RISK_TOLERANCE_LEVELS['AGGRESSIVE']: 0.35,
}
DEFAULT_SAVING_RATE = 0.20
GOAL_RATE_BONUS = {
    SAVING_GOALS['EMERGENCY']: 0.05,
    SAVING_GOALS['RETIREMENT']: 0.10,
}

# Share of post-savings income per spending area
RECOMMENDED_SPLIT = {
    'housing': 0.35,
    'transportation': 0.15,
    'food': 0.15,
    'utilities': 0.10,
    'healthcare': 0.10,
    'entertainment': 0.08,
    'other': 0.07,
}

# (minimum savings percent, points), checked top down
POINT_THRESHOLDS = [(20, 100), (15, 75), (10, 50), (5, 25)]
MIN_UNDER_BUDGET_POINTS = 10


def calculate_saving_progress(target_amount: float, current_amount: float) -> Dict[str, float]:
    """Uncapped progress towards a profile's savings target.

    Unlike budget cards this keeps the raw percentage, so values above 100
    show how far a target was exceeded.
    """
    percentage = (current_amount / target_amount) * 100 if target_amount else 0.0
    return {
        'percentage': percentage,
        'remaining': target_amount - current_amount,
        'is_completed': current_amount >= target_amount,
    }


def generate_budget_recommendation(
    monthly_income: float,
    saving_goal: Optional[str] = None,
    risk_tolerance: Optional[str] = None,
) -> Dict[str, float]:
    """Suggest a monthly budget breakdown.

    The saving rate comes from the risk tolerance (20% when unknown) with a
    bonus for emergency funds and retirement. Whatever is left is spread
    across spending areas by ``RECOMMENDED_SPLIT``.

    Example:
        >>> generate_budget_recommendation(1000, 'other', 'moderate')['savings']
        250.0
    """
    saving_rate = SAVING_RATES.get(risk_tolerance, DEFAULT_SAVING_RATE)
    saving_rate += GOAL_RATE_BONUS.get(saving_goal, 0.0)

    monthly_savings = monthly_income * saving_rate
    remaining_income = monthly_income - monthly_savings

    recommendation = {'savings': monthly_savings}
    for area, share in RECOMMENDED_SPLIT.items():
        recommendation[area] = remaining_income * share
    return recommendation


def calculate_points_for_savings(target_spending: float, actual_spending: float) -> int:
    """Reward points for staying under a spending target."""
    if actual_spending > target_spending:
        return 0
    if not target_spending:
        return MIN_UNDER_BUDGET_POINTS

    savings_percent = ((target_spending - actual_spending) / target_spending) * 100
    for threshold, points in POINT_THRESHOLDS:
        if savings_percent >= threshold:
            return points
    return MIN_UNDER_BUDGET_POINTS


@dataclass(frozen=True)
class RewardTier:
    name: str
    min_points: int
    max_points: float
    benefits: List[str]


REWARD_TIERS: Dict[str, RewardTier] = {
    'BRONZE': RewardTier('Bronze', 0, 999, ['Basic budget insights', 'Monthly savings report']),
    'SILVER': RewardTier(
        'Silver', 1000, 4999,
        ['Advanced budget insights', 'Weekly savings report', 'Custom savings goals'],
    ),
    'GOLD': RewardTier(
        'Gold', 5000, 9999,
        ['Premium budget insights', 'Daily savings report', 'Investment recommendations'],
    ),
    'PLATINUM': RewardTier(
        'Platinum', 10000, float('inf'),
        ['VIP budget insights', 'Real-time alerts', 'Personal finance advisor'],
    ),
}


def get_reward_tiers() -> Dict[str, RewardTier]:
    return dict(REWARD_TIERS)


def get_current_reward_tier(points: float) -> RewardTier:
    for key in ('PLATINUM', 'GOLD', 'SILVER'):
        tier = REWARD_TIERS[key]
        if points >= tier.min_points:
            return tier
    return REWARD_TIERS['BRONZE']
