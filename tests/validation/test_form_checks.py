from __future__ import annotations

from iep_backend.validation import check_form_structure


def test_valid_form_has_no_structural_issues(valid_iep) -> None:
    assert check_form_structure(valid_iep) == []


def test_missing_root() -> None:
    assert check_form_structure({}) == ["Missing root IEP structure"]
    assert check_form_structure(None) == ["Missing root IEP structure"]
    assert check_form_structure({"IEP": []}) == ["Missing root IEP structure"]


def test_missing_sections_and_transition_other_field(valid_iep) -> None:
    iep = valid_iep["IEP"]
    del iep["PARENT/GUARDIAN INFORMATION"]
    methods = iep["5. POSTSECONDARY TRANSITION"]["Postsecondary Training and Education"][
        "Method for Measuring Progress"
    ]
    del methods["Other (list)"]

    assert check_form_structure(valid_iep) == [
        "Missing required section: PARENT/GUARDIAN INFORMATION",
        'Missing "Other (list)" field in Postsecondary Training and Education methods',
    ]


def test_goal_shape(valid_iep) -> None:
    goals = valid_iep["IEP"]["6. MEASURABLE ANNUAL GOALS"]["GOALS"]
    goals.append({"NUMBER": 2, "AREA": "Math", "Objectives/Benchmarks": {}})

    assert check_form_structure(valid_iep) == [
        "Goal 2: Missing measurement methods section",
        "Goal 2: Objectives/Benchmarks must be an array",
    ]


def test_goals_must_be_an_array(valid_iep) -> None:
    valid_iep["IEP"]["6. MEASURABLE ANNUAL GOALS"]["GOALS"] = {"NUMBER": 1}
    # the service pointing at goal 1 now references an empty goal list
    assert check_form_structure(valid_iep) == [
        "GOALS must be an array",
        "SPECIALLY DESIGNED INSTRUCTION[0]: references Goal #1 but GOALS array is empty",
    ]


def test_service_goal_cross_references(valid_iep) -> None:
    services = valid_iep["IEP"]["7. SPECIALLY DESIGNED SERVICES"]
    services["RELATED SERVICES"] = [
        {"Description": "Speech", "Goal Addressed #": "1"},
        {"Description": "OT", "Goal Addressed #": 4},
        {"Description": "PT", "Goal Addressed #": "n/a"},
    ]
    services["MODIFICATIONS"] = {"Description": "Shortened tests"}

    assert check_form_structure(valid_iep) == [
        "RELATED SERVICES[1]: references Goal #4 not present in GOALS",
        'RELATED SERVICES[2]: "Goal Addressed #" must be a number',
        "MODIFICATIONS must be an array",
    ]
