"""
API router for contact management.

Reads are public; writes require a bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.auth.middleware import CurrentUserDep
from contactbook.auth.passwords import PasswordHasher, get_password_hasher
from contactbook.contacts.commands import (
    CreateContactCommand,
    DeleteContactCommand,
    UpdateContactCommand,
)
from contactbook.contacts.handlers import build_mediator
from contactbook.contacts.queries import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    GetAllContactsQuery,
    GetContactByIdQuery,
)
from contactbook.contacts.schemas import (
    ContactCreate,
    ContactCreatedResponse,
    ContactResponse,
    ContactSummaryResponse,
    ContactUpdate,
)
from contactbook.shared.database import get_db_session
from contactbook.shared.exceptions import ValidationError
from contactbook.shared.logging import get_logger
from contactbook.shared.pagination import PagedResult, SortDirection
from contactbook.shared.pipeline import Mediator
from contactbook.shared.rate_limit import rate_limit_commands, rate_limit_queries

logger = get_logger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contacts"])


def get_mediator(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> Mediator:
    """Dependency for the contact mediator."""
    return build_mediator(session, password_hasher)


MediatorDep = Annotated[Mediator, Depends(get_mediator)]


@router.get(
    "",
    response_model=PagedResult[ContactSummaryResponse],
    summary="List contacts",
    description="Search, sort and page contacts. Search matches name, surname "
    "or email case-insensitively.",
    dependencies=[Depends(rate_limit_queries)],
)
async def list_contacts(
    mediator: MediatorDep,
    search_phrase: Annotated[str | None, Query(alias="searchPhrase")] = None,
    page_number: Annotated[int, Query(alias="pageNumber")] = DEFAULT_PAGE_NUMBER,
    page_size: Annotated[int, Query(alias="pageSize")] = DEFAULT_PAGE_SIZE,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_direction: Annotated[str | None, Query(alias="sortDirection")] = None,
) -> PagedResult[ContactSummaryResponse]:
    try:
        direction = SortDirection.parse(sort_direction)
    except ValueError as e:
        raise ValidationError(errors={"sortDirection": [str(e)]}) from e

    query = GetAllContactsQuery(
        search_phrase=search_phrase,
        page_number=page_number,
        page_size=page_size,
        sort_by=sort_by,
        sort_direction=direction,
    )
    return await mediator.send(query)


@router.get(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Get contact",
    description="Get a single contact with its category and subcategory names.",
    dependencies=[Depends(rate_limit_queries)],
)
async def get_contact(contact_id: int, mediator: MediatorDep) -> ContactResponse:
    return await mediator.send(GetContactByIdQuery(id=contact_id))


@router.post(
    "",
    response_model=ContactCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
    dependencies=[Depends(rate_limit_commands)],
)
async def create_contact(
    body: ContactCreate,
    request: Request,
    response: Response,
    current_user: CurrentUserDep,
    mediator: MediatorDep,
) -> ContactCreatedResponse:
    """Create a contact and point the Location header at it."""
    command = CreateContactCommand(
        name=body.name,
        surname=body.surname,
        email=body.email,
        password=body.password,
        phone_number=body.phone_number,
        birth_date=body.birth_date,
        category_id=body.category_id,
        subcategory_id=body.subcategory_id,
        custom_subcategory=body.custom_subcategory,
    )
    contact_id = await mediator.send(command)

    logger.info(
        "Contact created via API",
        extra={"contact_id": contact_id, "user": current_user.subject},
    )
    response.headers["Location"] = str(request.url_for("get_contact", contact_id=contact_id))
    return ContactCreatedResponse(id=contact_id)


@router.patch(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Update contact",
    description="Replace the editable fields of a contact. Omit the password "
    "to keep the current one.",
    dependencies=[Depends(rate_limit_commands)],
)
async def update_contact(
    contact_id: int,
    body: ContactUpdate,
    current_user: CurrentUserDep,
    mediator: MediatorDep,
) -> None:
    command = UpdateContactCommand(
        id=contact_id,
        name=body.name,
        surname=body.surname,
        email=body.email,
        password=body.password,
        phone_number=body.phone_number,
        birth_date=body.birth_date,
        category_id=body.category_id,
        subcategory_id=body.subcategory_id,
        custom_subcategory=body.custom_subcategory,
    )
    await mediator.send(command)

    logger.info(
        "Contact updated via API",
        extra={"contact_id": contact_id, "user": current_user.subject},
    )


@router.delete(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete contact",
    dependencies=[Depends(rate_limit_commands)],
)
async def delete_contact(
    contact_id: int,
    current_user: CurrentUserDep,
    mediator: MediatorDep,
) -> None:
    await mediator.send(DeleteContactCommand(id=contact_id))

    logger.info(
        "Contact deleted via API",
        extra={"contact_id": contact_id, "user": current_user.subject},
    )
