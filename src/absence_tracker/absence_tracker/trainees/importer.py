from __future__ import annotations

import io

import pandas as pd

from ..core.exceptions import ValidationError

# Column titles of the trainee list template, lower-cased.
HEADER_MAP = {
    "cef": "cef",
    "nom": "name",
    "prénom": "first_name",
    "prenom": "first_name",
    "groupe": "groupe",
    "class": "groupe",
    "classe": "groupe",
    "telephone": "phone",
    "téléphone": "phone",
    "tel": "phone",
}
REQUIRED_FIELDS = ("cef", "name", "first_name", "groupe")

# The template has three title lines; titles are on line 4, data from line 5.
HEADER_ROW = 3


def read_trainee_sheet(content: bytes) -> tuple[list[dict], list[dict]]:
    """Trainee rows of the first sheet, plus per-row errors.

    Errors carry the spreadsheet line number (1-based).
    """

    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=str, engine="openpyxl")
    except Exception as e:
        raise ValidationError(f"Erreur lors de la lecture du fichier Excel: {e}") from e

    if len(df) <= HEADER_ROW + 1:
        raise ValidationError("Le fichier ne contient pas assez de lignes")

    header = [None if pd.isna(h) else HEADER_MAP.get(str(h).strip().lower()) for h in df.iloc[HEADER_ROW]]

    rows: list[dict] = []
    errors: list[dict] = []
    for idx in range(HEADER_ROW + 1, len(df)):
        values = df.iloc[idx]
        if values.isna().all():
            continue

        data = {}
        for field, value in zip(header, values):
            if field and not pd.isna(value) and str(value).strip():
                data[field] = str(value).strip()

        if not all(data.get(f) for f in REQUIRED_FIELDS):
            errors.append({"row": idx + 1, "error": "Champs obligatoires manquants"})
            continue
        rows.append(data)

    return rows, errors
