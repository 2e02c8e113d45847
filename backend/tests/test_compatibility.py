"""
Tests for the diagnostic compatibility score reported on circles.
"""

import pytest

from dinner_circles.services.compatibility import circle_compatibility, compatibility_score
from dinner_circles.services.matching_types import UserProfile


def profile(user_id=1, **fields):
    return UserProfile(user_id=user_id, **fields)


def test_empty_profiles_score_zero():
    assert compatibility_score(profile(1), profile(2)) == 0


def test_identical_profiles_score_full_marks():
    fields = dict(
        interests=["wine", "jazz"],
        personality_type="extrovert",
        social_preferences=["small groups"],
        dietary_restrictions="vegan",
        cooking_experience="advanced",
    )
    assert compatibility_score(profile(1, **fields), profile(2, **fields)) == 100


def test_interest_overlap_is_proportional():
    a = profile(1, interests=["wine", "jazz", "hiking", "film"])
    b = profile(2, interests=["wine", "jazz"])
    assert compatibility_score(a, b) == pytest.approx(15.0)


@pytest.mark.parametrize(
    "first,second,expected",
    [
        ("introvert", "introvert", 25),
        ("introvert", "ambivert", 20),
        ("ambivert", "extrovert", 20),
        ("introvert", "extrovert", 10),
    ],
)
def test_personality_scoring(first, second, expected):
    assert compatibility_score(profile(1, personality_type=first), profile(2, personality_type=second)) == expected


def test_dietary_scoring():
    assert compatibility_score(profile(1, dietary_restrictions="vegan"), profile(2, dietary_restrictions="vegan")) == 15
    assert (
        compatibility_score(
            profile(1, dietary_restrictions="vegetarian"), profile(2, dietary_restrictions="vegetarian, no nuts")
        )
        == 10
    )
    assert compatibility_score(profile(1, dietary_restrictions="halal"), profile(2, dietary_restrictions="kosher")) == 5


def test_cooking_experience_gap():
    assert compatibility_score(profile(1, cooking_experience="beginner"), profile(2, cooking_experience="intermediate")) == 10
    assert compatibility_score(profile(1, cooking_experience="beginner"), profile(2, cooking_experience="advanced")) == 5
    assert compatibility_score(profile(1, cooking_experience="beginner"), profile(2)) == 0


def test_circle_compatibility_is_mean_of_pairs():
    profiles = [
        profile(1, personality_type="introvert"),
        profile(2, personality_type="introvert"),
        profile(3, personality_type="extrovert"),
    ]
    # pairs: 25, 10, 10
    assert circle_compatibility(profiles) == 15.0


def test_circle_compatibility_ignores_missing_profiles():
    assert circle_compatibility([profile(1), None]) == 0.0
    assert circle_compatibility([]) == 0.0
