"""Shape of the structured record extracted from an Ohio-style IEP form."""

from __future__ import annotations

from typing import Iterable

from .schema import BOOLEAN, INTEGER, STRING, ObjectOf, array, nullable, obj, optional

TEXT = nullable(STRING)


def _flags(labels: Iterable[str]) -> ObjectOf:
    return obj({label: optional(BOOLEAN) for label in labels})


def _texts(labels: Iterable[str]) -> ObjectOf:
    return obj({label: optional(TEXT) for label in labels})


_CONTACT = _texts(
    ("NAME", "STREET", "CITY", "STATE", "ZIP", "HOME PHONE", "WORK PHONE", "CELL PHONE", "EMAIL")
)

CHILD_INFORMATION = obj(
    {
        "NAME": STRING,
        "ID NUMBER": optional(TEXT),
        "DATE OF BIRTH": STRING,
        "STREET": optional(TEXT),
        "CITY": optional(TEXT),
        "STATE": optional(TEXT),
        "ZIP": optional(TEXT),
        "GENDER": optional(TEXT),
        "GRADE": optional(TEXT),
        "DISTRICT OF RESIDENCE": optional(TEXT),
        "COUNTY OF RESIDENCE": optional(TEXT),
        "DISTRICT OF SERVICE": optional(TEXT),
        "Is the child in preschool?": optional(BOOLEAN),
        "Will the child be 14 years old before the end of this IEP?": optional(BOOLEAN),
        "Is the child a ward of the state?": optional(BOOLEAN),
        "If yes, name of surrogate parent": optional(TEXT),
    }
)

PARENT_INFORMATION = obj(
    {
        "Parent/Guardian 1": _CONTACT,
        "Parent/Guardian 2": optional(_CONTACT),
        "OTHER INFORMATION": optional(TEXT),
    }
)

MEETING_INFORMATION = obj(
    {
        "MEETING DATE": optional(TEXT),
        "MEETING TYPE": optional(
            _flags(
                (
                    "INITIAL IEP",
                    "ANNUAL REVIEW",
                    "REVIEW OTHER THAN ANNUAL REVIEW",
                    "AMENDMENT",
                    "OTHER",
                )
            )
        ),
    }
)

AMENDMENT = _texts(
    (
        "IEP SECTION AMENDED",
        "CHANGES TO THE IEP",
        "DATE OF AMENDMENT",
        "PARTICIPANT & ROLE INITIALS",
    )
)

TRANSITION_AREA = obj(
    {
        "Measurable Postsecondary Goal": optional(TEXT),
        "Age Appropriate Transition Assessment": optional(TEXT),
        "Courses of Study": optional(TEXT),
        "Numbers of Annual Goal(s) Related to Transition Needs": optional(TEXT),
        "Transition Services/Activities": optional(
            array(
                _texts(
                    ("Service/Activity", "Projected Start Date", "Responsible Agency/Person")
                )
            )
        ),
        "Method for Measuring Progress": optional(
            obj(
                {
                    **{
                        label: optional(BOOLEAN)
                        for label in (
                            "Curriculum-Based Assessment",
                            "Portfolios",
                            "Observation",
                            "Anecdotal Record",
                            "Checklist",
                            "Work Sample",
                            "Rubric",
                        )
                    },
                    "Other (list)": TEXT,
                }
            )
        ),
    }
)

POSTSECONDARY_TRANSITION = obj(
    {
        "Postsecondary Training and Education": optional(TRANSITION_AREA),
        "Competitive Integrated Employment": optional(TRANSITION_AREA),
        "Independent Living (as appropriate)": optional(TRANSITION_AREA),
    }
)

GOAL = obj(
    {
        "NUMBER": INTEGER,
        "AREA": STRING,
        "PRESENT LEVEL OF ACADEMIC ACHIEVEMENT AND FUNCTIONAL PERFORMANCE": optional(TEXT),
        "MEASURABLE ANNUAL GOAL": STRING,
        "METHOD(S) FOR MEASURING THE CHILD'S PROGRESS TOWARDS ANNUAL GOAL": _flags(
            (
                "Curriculum-Based Assessment",
                "Portfolios",
                "Observation",
                "Anecdotal Records",
                "Short-Cycle Assessments",
                "Performance Assessments",
                "Checklists",
                "Running Records",
                "Work Samples",
                "Inventories",
                "Rubrics",
            )
        ),
        "Objectives/Benchmarks": array(_texts(("Objective/Benchmark", "Date of Mastery"))),
    }
)

MEASURABLE_ANNUAL_GOALS = obj(
    {
        "FREQUENCY OF WRITTEN PROGRESS REPORTING TOWARD GOAL MASTERY TO PARENTS": optional(TEXT),
        "GOALS": array(GOAL),
    }
)

GOAL_SERVICE = obj(
    {
        "Description": STRING,
        "Goal Addressed #": optional(nullable(INTEGER)),
        "Provider Title": optional(TEXT),
        "Location of Service": optional(TEXT),
        "Begin Date": optional(TEXT),
        "End Date": optional(TEXT),
        "Amount of Time": optional(TEXT),
        "Frequency": optional(TEXT),
    }
)

DATED_SERVICE = obj(
    {
        "Description": STRING,
        "Begin Date": optional(TEXT),
        "End Date": optional(TEXT),
    }
)

SPECIALLY_DESIGNED_SERVICES = obj(
    {
        "SPECIALLY DESIGNED INSTRUCTION": optional(array(GOAL_SERVICE)),
        "RELATED SERVICES": optional(array(GOAL_SERVICE)),
        "ACCOMMODATIONS": optional(array(DATED_SERVICE)),
        "MODIFICATIONS": optional(array(DATED_SERVICE)),
        "SUPPORT FOR SCHOOL PERSONNEL": optional(array(DATED_SERVICE)),
        "SERVICE(S) TO SUPPORT MEDICAL NEEDS": optional(array(DATED_SERVICE)),
    }
)

TRANSPORTATION = obj(
    {
        "Does the child require special transportation?": optional(BOOLEAN),
        "Does the child need transportation to and from services?": optional(BOOLEAN),
        "Special Transportation Needs": optional(
            obj(
                {
                    **{
                        label: optional(BOOLEAN)
                        for label in (
                            "Wheelchair Accessible",
                            "Car Seat",
                            "Harness/Seat Belt",
                            "Monitor/Aide",
                            "Air Conditioning",
                            "Shortened Route/Day",
                        )
                    },
                    "Other (specify)": optional(TEXT),
                }
            )
        ),
    }
)

IEP_FORM_SCHEMA = obj(
    {
        "IEP": obj(
            {
                "CHILD'S INFORMATION": CHILD_INFORMATION,
                "PARENT/GUARDIAN INFORMATION": PARENT_INFORMATION,
                "MEETING INFORMATION": optional(MEETING_INFORMATION),
                "IEP TIMELINES": optional(_texts(("ETR COMPLETION DATE", "NEXT ETR DUE DATE"))),
                "IEP EFFECTIVE DATES": optional(_texts(("START", "END", "NEXT IEP REVIEW"))),
                "AMENDMENTS": array(AMENDMENT),
                "1. FUTURE PLANNING": optional(TEXT),
                "2. SPECIAL INSTRUCTIONAL FACTORS": optional(ObjectOf(fields={})),
                "3. PROFILE": optional(
                    _texts(
                        (
                            "Most Recent Evaluation Information",
                            "Most Recent District Testing",
                            "Concerns from Parent",
                            "Effects on Progress in General Education",
                        )
                    )
                ),
                "4. EXTENDED SCHOOL YEAR SERVICES": optional(ObjectOf(fields={})),
                "5. POSTSECONDARY TRANSITION": optional(POSTSECONDARY_TRANSITION),
                "6. MEASURABLE ANNUAL GOALS": MEASURABLE_ANNUAL_GOALS,
                "7. SPECIALLY DESIGNED SERVICES": SPECIALLY_DESIGNED_SERVICES,
                "8. TRANSPORTATION AS A RELATED SERVICE": optional(TRANSPORTATION),
            }
        )
    }
)


__all__ = ["IEP_FORM_SCHEMA"]
