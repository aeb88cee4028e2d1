"""
Field rules for contact commands and queries.

Messages are user-facing and shown verbatim by the web client.
"""

from contactbook.contacts.commands import (
    CreateContactCommand,
    DeleteContactCommand,
    UpdateContactCommand,
)
from contactbook.contacts.queries import GetAllContactsQuery, GetContactByIdQuery
from contactbook.shared.database import MAX_OFFSET
from contactbook.shared.validation import (
    Rule,
    ValidationResult,
    Validator,
    before_today,
    email_address,
    greater_or_equal,
    greater_than,
    is_blank,
    length,
    matches,
    max_length,
    min_length,
    not_blank,
    one_of,
    present,
    within_years,
)

ALLOWED_PAGE_SIZES = (5, 10, 15, 30)
ALLOWED_SORT_COLUMNS = ("Name", "Surname", "Category")

MAX_AGE_YEARS = 150
PHONE_PATTERN = r"^[\d\s\-\+\(\)]+$"

CONTACT_ID_MESSAGE = "ID kontaktu musi być większe od zera."


def _password_rules(when=None) -> list[Rule]:
    return [
        Rule("password", min_length(8), "Hasło musi zawierać minimum 8 znaków.", when),
        Rule("password", max_length(100), "Hasło nie może przekraczać 100 znaków.", when),
        Rule("password", matches(r"[A-Z]"), "Hasło musi zawierać przynajmniej jedną wielką literę.", when),
        Rule("password", matches(r"[a-z]"), "Hasło musi zawierać przynajmniej jedną małą literę.", when),
        Rule("password", matches(r"[0-9]"), "Hasło musi zawierać przynajmniej jedną cyfrę.", when),
        Rule("password", matches(r"[\W_]"), "Hasło musi zawierać przynajmniej jeden znak specjalny.", when),
    ]


def _custom_subcategory_given(request) -> bool:
    return request.custom_subcategory is not None


# Shared by create and update; password rules are added per command.
CONTACT_FIELD_RULES: list[Rule] = [
    Rule("name", not_blank, "Imię jest wymagane."),
    Rule("name", length(1, 100), "Imię musi zawierać od 1 do 100 znaków."),
    Rule("surname", not_blank, "Nazwisko jest wymagane."),
    Rule("surname", length(1, 100), "Nazwisko musi zawierać od 1 do 100 znaków."),
    Rule("email", not_blank, "Email jest wymagany."),
    Rule(
        "email",
        email_address,
        "Nieprawidłowy format adresu email.",
        when=lambda r: not is_blank(r.email),
    ),
    Rule("email", max_length(255), "Email nie może przekraczać 255 znaków."),
    Rule("phone_number", not_blank, "Numer telefonu jest wymagany."),
    Rule(
        "phone_number",
        matches(PHONE_PATTERN),
        "Numer telefonu może zawierać tylko cyfry, spacje, myślniki, plus i nawiasy.",
        when=lambda r: not is_blank(r.phone_number),
    ),
    Rule("phone_number", length(9, 20), "Numer telefonu musi zawierać od 9 do 20 znaków."),
    Rule("birth_date", present, "Data urodzenia jest wymagana."),
    Rule("birth_date", before_today, "Data urodzenia musi być datą z przeszłości."),
    Rule(
        "birth_date",
        within_years(MAX_AGE_YEARS),
        f"Data urodzenia nie może być starsza niż {MAX_AGE_YEARS} lat.",
    ),
    Rule("category_id", present, "Kategoria jest wymagana."),
    Rule("category_id", greater_than(0), "Kategoria jest wymagana."),
    Rule("subcategory_id", greater_than(0), "Podkategoria musi mieć prawidłową wartość."),
    Rule(
        "custom_subcategory",
        not_blank,
        "Niestandardowa podkategoria nie może być pusta.",
        when=_custom_subcategory_given,
    ),
    Rule(
        "custom_subcategory",
        max_length(100),
        "Niestandardowa podkategoria nie może przekraczać 100 znaków.",
    ),
]


class CreateContactValidator(Validator[CreateContactCommand]):
    rules = [
        *CONTACT_FIELD_RULES,
        Rule("password", not_blank, "Hasło jest wymagane."),
        *_password_rules(when=lambda r: not is_blank(r.password)),
    ]


class UpdateContactValidator(Validator[UpdateContactCommand]):
    """Password is optional on update; when given it must be as strong as on create."""

    rules = [
        Rule("id", greater_than(0), CONTACT_ID_MESSAGE),
        *CONTACT_FIELD_RULES,
        *_password_rules(when=lambda r: not is_blank(r.password)),
    ]


class DeleteContactValidator(Validator[DeleteContactCommand]):
    rules = [Rule("id", greater_than(0), CONTACT_ID_MESSAGE)]


class GetContactByIdValidator(Validator[GetContactByIdQuery]):
    rules = [Rule("id", greater_than(0), CONTACT_ID_MESSAGE)]


class GetAllContactsValidator(Validator[GetAllContactsQuery]):
    rules = [
        Rule("page_number", greater_or_equal(1), "Page number must be greater than or equal to 1"),
        Rule(
            "page_size",
            one_of(ALLOWED_PAGE_SIZES),
            f"Page size must be in [{','.join(str(size) for size in ALLOWED_PAGE_SIZES)}]",
        ),
        Rule(
            "sort_by",
            one_of(ALLOWED_SORT_COLUMNS),
            f"Sort by is optional, or must be in [{','.join(ALLOWED_SORT_COLUMNS)}]",
        ),
    ]

    def validate(self, request: GetAllContactsQuery) -> ValidationResult:
        result = super().validate(request)
        if (
            request.page_number >= 1
            and request.page_size in ALLOWED_PAGE_SIZES
            and (request.page_number - 1) * request.page_size > MAX_OFFSET
        ):
            result.add_error("pageNumber", "Page number is too large")
        return result
