from __future__ import annotations

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

AMOUNT_MAX_DIGITS = 14
AMOUNT_DECIMAL_PLACES = 2
# A running total can briefly hold goal + one donation before the clamp.
CURRENT_AMOUNT_MAX_DIGITS = AMOUNT_MAX_DIGITS + 1

SAMPLE_PROJECTS = [
    {
        "title": "Clean Water Initiative",
        "description": "Providing clean drinking water to rural communities in Africa",
        "goal_amount": "10000.00",
    },
    {
        "title": "Education for All",
        "description": "Building schools and providing educational materials for underserved communities",
        "goal_amount": "25000.00",
    },
    {
        "title": "Wildlife Conservation",
        "description": "Protecting endangered species and their habitats",
        "goal_amount": "15000.00",
    },
]
