from questlog.services.leveling import (
    QuestRewardResult,
    RewardPackage,
    apply_quest_reward,
    derive_level,
)


def test_derive_level_uses_flat_hundred_xp_curve():
    assert derive_level(0) == 1
    assert derive_level(99) == 1
    assert derive_level(100) == 2
    assert derive_level(200) == 3
    assert derive_level(450) == 5
    assert derive_level(999) == 10


def test_derive_level_matches_formula_and_is_monotonic():
    previous = derive_level(0)
    for experience in range(0, 5001, 7):
        level = derive_level(experience)
        assert level == experience // 100 + 1
        assert level >= previous
        previous = level


def test_derive_level_does_not_clamp_negative_experience():
    assert derive_level(-1) == 0


def test_reward_without_level_up():
    result = apply_quest_reward(RewardPackage.from_config({"experience": 50}), 25, 1)

    assert result == QuestRewardResult(
        experience_reward=50,
        new_experience=75,
        new_level=1,
        leveled_up=False,
        item_rewards=[],
    )


def test_reward_with_level_up():
    result = apply_quest_reward(RewardPackage.from_config({"experience": 50}), 80, 1)

    assert result.experience_reward == 50
    assert result.new_experience == 130
    assert result.new_level == 2
    assert result.leveled_up is True


def test_reward_with_multiple_level_ups():
    result = apply_quest_reward(RewardPackage.from_config({"experience": 250}), 50, 1)

    assert result.new_experience == 300
    assert result.new_level == 4
    assert result.leveled_up is True


def test_reward_with_item():
    package = RewardPackage.from_config({"experience": 100, "item": "item123"})
    result = apply_quest_reward(package, 0, 1)

    assert result.experience_reward == 100
    assert result.item_rewards == ["item123"]
    assert result.new_level == 2
    assert result.leveled_up is True


def test_empty_reward_package():
    result = apply_quest_reward(RewardPackage.from_config({}), 50, 1)

    assert result.experience_reward == 0
    assert result.new_experience == 50
    assert result.new_level == 1
    assert result.leveled_up is False
    assert result.item_rewards == []


def test_missing_reward_package_behaves_as_empty():
    assert apply_quest_reward(None, 50, 1) == apply_quest_reward(RewardPackage(), 50, 1)
    assert RewardPackage.from_config(None) == RewardPackage(experience=0, item=None)


def test_reward_package_normalizes_item_identifier():
    assert RewardPackage.from_config({"item": {"id": "sword-1"}}).item == "sword-1"
    assert RewardPackage.from_config({"experience": None, "item": ""}) == RewardPackage()


def test_leveled_up_compares_against_supplied_level():
    package = RewardPackage.from_config({"experience": 10})

    # 300 xp is level 4, but a stale level of 1 is taken at face value.
    stale = apply_quest_reward(package, 300, 1)
    assert stale.new_level == 4
    assert stale.leveled_up is True

    current = apply_quest_reward(package, 300, 4)
    assert current.leveled_up is False


def test_reward_calculation_is_repeatable():
    package = RewardPackage.from_config({"experience": 75, "item": "gem"})

    first = apply_quest_reward(package, 40, 1)
    second = apply_quest_reward(package, 40, 1)

    assert first == second
    assert package == RewardPackage(experience=75, item="gem")


def test_new_level_always_derived_from_new_experience():
    for experience in range(0, 1000, 37):
        for reward in (0, 1, 99, 100, 250):
            package = RewardPackage(experience=reward)
            result = apply_quest_reward(package, experience, derive_level(experience))
            assert result.new_level == derive_level(result.new_experience)
            assert result.leveled_up == (result.new_level > derive_level(experience))


def test_raw_reward_mapping_is_accepted():
    result = apply_quest_reward({"experience": 50}, 25, 1)

    assert result == apply_quest_reward(RewardPackage(experience=50), 25, 1)
    assert result.new_experience == 75
    assert apply_quest_reward({}, 50, 1).experience_reward == 0
    assert apply_quest_reward({"experience": 100, "item": "item123"}, 0, 1).item_rewards == [
        "item123"
    ]
