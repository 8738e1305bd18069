"""Contact routes for accepting landing page messages."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from landing_service.shared.contact.errors import ContactError, RateLimited
from landing_service.shared.contact.pipeline import ContactPipeline
from landing_service.shared.contact.schemas import ContactResponse, ErrorResponse

router = APIRouter(tags=["contact"])


def get_client_ip(request: Request) -> str:
    """Get client IP address for rate limiting."""
    # Check for forwarded IP (from proxy/load balancer)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    # Fallback to direct connection
    return request.client.host if request.client else "unknown"


def get_pipeline(request: Request) -> ContactPipeline:
    return request.app.state.pipeline


@router.post(
    "/contact",
    response_model=ContactResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit_contact_form(request: Request, pipeline: ContactPipeline = Depends(get_pipeline)):
    """
    Accept a contact form message.

    - In-memory rate limiting per client IP (checked before the body is parsed)
    - All four fields (name, email, subject, message) required
    - Saved to the submission log before responding
    - Email notification sent in the background; its outcome never changes this response
    """
    client_ip = get_client_ip(request)
    try:
        # The body is only read once the rate check has passed
        await pipeline.submit(client_ip, request.body)
    except RateLimited as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=e.message,
            headers={"Retry-After": str(e.retry_after)},
        )
    except ContactError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return ContactResponse(success=True)
