from __future__ import annotations

from dataclasses import dataclass

from src.normalize.schema import StudentRecord


@dataclass(frozen=True, slots=True)
class GoldenStudent:
    student_id: str
    description: str
    profile: StudentRecord
    expected_scholarship_ids: tuple[str, ...]

    @property
    def expected_match_count(self) -> int:
        return len(self.expected_scholarship_ids)


def get_golden_students() -> list[GoldenStudent]:
    """Reference personas with their expected matches against `data/scholarships.json`.

    Expected ids are listed in ranked order (largest award first).
    """

    return [
        GoldenStudent(
            student_id="golden_maria_garcia",
            description="High school senior in computer science, first-generation, Hispanic, with need.",
            profile=StudentRecord(
                student_id="golden_maria_garcia",
                name="Maria Garcia",
                gpa=3.6,
                major="Computer Science",
                enrollment_status="high_school_senior",
                citizenship_status="US Citizen",
                household_income=42000,
                financial_need=True,
                first_generation=True,
                gender="female",
                ethnicity=("Hispanic", "Latino"),
                community_service_hours=150,
                state="CA",
            ),
            expected_scholarship_ids=("sch_001", "sch_002", "sch_004", "sch_003"),
        ),
        GoldenStudent(
            student_id="golden_james_wilson",
            description="Suburban education undergraduate, military dependent, no financial need.",
            profile=StudentRecord(
                student_id="golden_james_wilson",
                name="James Wilson",
                gpa=3.2,
                major="Education",
                enrollment_status="undergraduate",
                citizenship_status="US Citizen",
                household_income=85000,
                financial_need=False,
                first_generation=False,
                gender="male",
                ethnicity=("African American",),
                residency="suburban",
                military_affiliation="dependent",
                community_service_hours=80,
                state="TX",
                graduation_year=2027,
            ),
            expected_scholarship_ids=("sch_010", "sch_012"),
        ),
        GoldenStudent(
            student_id="golden_sarah_chen",
            description="Urban nursing undergraduate, permanent resident, matches STEM awards only through the nursing rule.",
            profile=StudentRecord(
                student_id="golden_sarah_chen",
                name="Sarah Chen",
                gpa=3.9,
                major="Nursing",
                enrollment_status="undergraduate",
                citizenship_status="Permanent Resident",
                household_income=65000,
                financial_need=False,
                first_generation=False,
                gender="female",
                ethnicity=("Asian",),
                residency="urban",
                community_service_hours=200,
                state="NY",
                graduation_year=2026,
            ),
            expected_scholarship_ids=("sch_002", "sch_008"),
        ),
        GoldenStudent(
            student_id="golden_tyler_johnson",
            description="Rural business-bound senior, first-generation, with need.",
            profile=StudentRecord(
                student_id="golden_tyler_johnson",
                name="Tyler Johnson",
                gpa=2.8,
                major="Business",
                enrollment_status="high_school_senior",
                citizenship_status="US Citizen",
                household_income=35000,
                financial_need=True,
                first_generation=True,
                gender="male",
                ethnicity=("White",),
                residency="rural",
                community_service_hours=120,
                state="IA",
                graduation_year=2026,
            ),
            expected_scholarship_ids=("sch_003", "sch_006", "sch_005", "sch_013"),
        ),
        GoldenStudent(
            student_id="golden_priya_patel",
            description="DACA data science undergraduate with need.",
            profile=StudentRecord(
                student_id="golden_priya_patel",
                name="Priya Patel",
                gpa=3.4,
                major="Data Science",
                enrollment_status="undergraduate",
                citizenship_status="DACA",
                household_income=48000,
                financial_need=True,
                first_generation=False,
                gender="female",
                ethnicity=("Asian", "Indian"),
                residency="urban",
                community_service_hours=60,
                state="IL",
                graduation_year=2025,
            ),
            expected_scholarship_ids=("sch_009",),
        ),
        GoldenStudent(
            student_id="golden_no_matches",
            description="International philosophy undergraduate below every GPA floor.",
            profile=StudentRecord(
                student_id="golden_no_matches",
                name="No Matches",
                gpa=1.8,
                major="Philosophy",
                enrollment_status="undergraduate",
                citizenship_status="International",
                household_income=60000,
                financial_need=False,
                first_generation=False,
            ),
            expected_scholarship_ids=(),
        ),
        GoldenStudent(
            student_id="golden_all_matches",
            description="Perfect-GPA senior with every favorable flag; matches each award it has no unmet attribute for.",
            profile=StudentRecord(
                student_id="golden_all_matches",
                name="All Matches",
                gpa=4.0,
                major="Computer Science",
                enrollment_status="high_school_senior",
                citizenship_status="US Citizen",
                household_income=20000,
                financial_need=True,
                first_generation=True,
                gender="female",
                community_service_hours=200,
            ),
            expected_scholarship_ids=("sch_001", "sch_002", "sch_003"),
        ),
        GoldenStudent(
            student_id="golden_borderline",
            description="Engineering undergraduate exactly at the Women in STEM GPA floor.",
            profile=StudentRecord(
                student_id="golden_borderline",
                name="Borderline",
                gpa=3.2,
                major="Engineering",
                enrollment_status="undergraduate",
                citizenship_status="US Citizen",
                household_income=60000,
                financial_need=False,
                first_generation=False,
                gender="female",
            ),
            expected_scholarship_ids=("sch_002",),
        ),
    ]
