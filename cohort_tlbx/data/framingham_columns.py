"""Column definitions for the Framingham Heart Study cohort extract."""

from .base_columns import BaseColumn, ColumnMetadata, FeatureKind


class FraminghamColumn(BaseColumn):
    """Column names for the Framingham Heart Study teaching dataset (``framingham.csv``).

    Columns:
    - ``male``: int - Sex (0 = female, 1 = male)
    - ``age``: float - Age at examination (years)
    - ``education``: int - Education level (1-4)
    - ``current_smoker``: int - Current smoker (0/1)
    - ``cigs_per_day``: float - Cigarettes smoked per day
    - ``bp_meds``: int - On blood pressure medication (0/1)
    - ``prevalent_stroke``: int - History of stroke (0/1)
    - ``prevalent_hyp``: int - Hypertensive (0/1)
    - ``diabetes``: int - Diabetic (0/1)
    - ``tot_chol``: float - Total cholesterol (mg/dL)
    - ``sys_bp``: float - Systolic blood pressure (mmHg)
    - ``dia_bp``: float - Diastolic blood pressure (mmHg)
    - ``bmi``: float - Body Mass Index (kg/m²)
    - ``heart_rate``: float - Heart rate (bpm)
    - ``glucose``: float - Glucose level (mg/dL)
    - ``ten_year_chd``: int - Coronary heart disease within ten years (outcome)
    """

    # Outcome
    TARGET = "ten_year_chd"
    """Coronary heart disease within ten years (outcome flag)."""
    TEN_YEAR_CHD = TARGET

    # Demographics
    MALE = "male"
    """Sex (0 = female, 1 = male)."""
    AGE = "age"
    EDUCATION = "education"
    """Education level, ordinal 1-4."""

    # Smoking
    CURRENT_SMOKER = "current_smoker"
    CIGS_PER_DAY = "cigs_per_day"

    # Medical history
    BP_MEDS = "bp_meds"
    PREVALENT_STROKE = "prevalent_stroke"
    PREVALENT_HYP = "prevalent_hyp"
    DIABETES = "diabetes"

    # Examination measurements
    TOT_CHOL = "tot_chol"
    SYS_BP = "sys_bp"
    DIA_BP = "dia_bp"
    BMI = "bmi"
    HEART_RATE = "heart_rate"
    GLUCOSE = "glucose"

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column."""
        return _COLUMN_METADATA_FRAMINGHAM[self]

    @classmethod
    def raw_header(cls) -> list[str]:
        """Column order of the raw CSV file (also used when the file has no header row)."""
        return [col.original_name for col in cls if col != cls.TARGET] + [cls.TARGET.original_name]


_NO_YES = ("No", "Yes")


def _binary(original: str, cleaned: str, pretty: str, labels: tuple[str, str] = _NO_YES) -> ColumnMetadata:
    return ColumnMetadata(
        original_name=original,
        cleaned_name=cleaned,
        dtype="float64",
        pretty_name=pretty,
        kind=FeatureKind.CATEGORICAL,
        domain=(0, 1),
        labels=labels,
    )


def _numeric(original: str, cleaned: str, pretty: str, unit: str) -> ColumnMetadata:
    return ColumnMetadata(
        original_name=original,
        cleaned_name=cleaned,
        dtype="float64",
        pretty_name=pretty,
        unit=unit,
    )


_COLUMN_METADATA_FRAMINGHAM: dict[FraminghamColumn, ColumnMetadata] = {
    FraminghamColumn.MALE: _binary("male", "male", "Sex", labels=("Female", "Male")),
    FraminghamColumn.AGE: _numeric("age", "age", "Age", "years"),
    FraminghamColumn.EDUCATION: ColumnMetadata(
        original_name="education",
        cleaned_name="education",
        dtype="float64",
        pretty_name="Education",
        kind=FeatureKind.ORDINAL,
        domain=(1, 2, 3, 4),
    ),
    FraminghamColumn.CURRENT_SMOKER: _binary("currentSmoker", "current_smoker", "Current Smoker"),
    FraminghamColumn.CIGS_PER_DAY: _numeric("cigsPerDay", "cigs_per_day", "Cigarettes Per Day", "cigs/day"),
    FraminghamColumn.BP_MEDS: _binary("BPMeds", "bp_meds", "BP Medication"),
    FraminghamColumn.PREVALENT_STROKE: _binary("prevalentStroke", "prevalent_stroke", "Prevalent Stroke"),
    FraminghamColumn.PREVALENT_HYP: _binary("prevalentHyp", "prevalent_hyp", "Hypertension"),
    FraminghamColumn.DIABETES: _binary("diabetes", "diabetes", "Diabetes"),
    FraminghamColumn.TOT_CHOL: _numeric("totChol", "tot_chol", "Total Cholesterol", "mg/dL"),
    FraminghamColumn.SYS_BP: _numeric("sysBP", "sys_bp", "Systolic BP", "mmHg"),
    FraminghamColumn.DIA_BP: _numeric("diaBP", "dia_bp", "Diastolic BP", "mmHg"),
    FraminghamColumn.BMI: _numeric("BMI", "bmi", "BMI", "kg/m²"),
    FraminghamColumn.HEART_RATE: _numeric("heartRate", "heart_rate", "Heart Rate", "bpm"),
    FraminghamColumn.GLUCOSE: _numeric("glucose", "glucose", "Glucose", "mg/dL"),
    FraminghamColumn.TEN_YEAR_CHD: _binary("TenYearCHD", "ten_year_chd", "10-Year CHD"),
}

CONTINUOUS_FEATURES: tuple[str, ...] = (
    FraminghamColumn.AGE,
    FraminghamColumn.CIGS_PER_DAY,
    FraminghamColumn.TOT_CHOL,
    FraminghamColumn.SYS_BP,
    FraminghamColumn.DIA_BP,
    FraminghamColumn.BMI,
    FraminghamColumn.HEART_RATE,
    FraminghamColumn.GLUCOSE,
)
"""Continuous features projected by default and used by the risk estimator."""
