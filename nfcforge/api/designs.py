"""
Designer session endpoints.

Each session owns one DesignStore. The UI sends one action per request
and gets back the full, consistent state (design, ui, quantity, pricing).
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from nfcforge.api.pricing import PricingResponse
from nfcforge.models.design import DesignPayload
from nfcforge.services.design_sessions import DesignSessionRegistry, get_session_registry
from nfcforge.services.design_store import DesignSnapshot, parse_action

router = APIRouter(prefix="/designs", tags=["designs"])


class UIStateResponse(BaseModel):
    selected_element_id: str | None = None
    active_tab: str
    is_dragging: bool


class DesignStateResponse(BaseModel):
    """Response model for the current designer state."""

    session_id: str
    design: DesignPayload
    ui: UIStateResponse
    quantity: int
    pricing: PricingResponse

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: DesignSnapshot) -> "DesignStateResponse":
        return cls(
            session_id=session_id,
            design=DesignPayload.from_design(snapshot.design),
            ui=UIStateResponse(**snapshot.ui.to_dict()),
            quantity=snapshot.quantity,
            pricing=PricingResponse.from_details(snapshot.pricing),
        )


class OpenSessionRequest(BaseModel):
    """Request model for opening a designer session."""

    design: DesignPayload | None = Field(
        default=None,
        description="Starting design; defaults to a blank classic PVC card",
    )
    quantity: int = Field(default=1, description="Starting quantity")


class ActionRequest(BaseModel):
    """One designer action, e.g. {"type": "set_material", "material": "Metal"}."""

    type: str = Field(..., description="Action type", examples=["set_material"])

    model_config = {"extra": "allow"}

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


Registry = Annotated[DesignSessionRegistry, Depends(get_session_registry)]


@router.post("", response_model=DesignStateResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    registry: Registry,
    request: OpenSessionRequest | None = None,
) -> DesignStateResponse:
    """Open a new designer session."""
    request = request or OpenSessionRequest()
    design = request.design.to_design() if request.design else None
    session_id, store = registry.open(design=design, quantity=request.quantity)
    return DesignStateResponse.from_snapshot(session_id, store.state)


@router.get("/{session_id}", response_model=DesignStateResponse)
async def get_state(session_id: str, registry: Registry) -> DesignStateResponse:
    """Get the current design, UI state and pricing for a session."""
    store = registry.get(session_id)
    return DesignStateResponse.from_snapshot(session_id, store.state)


@router.post("/{session_id}/actions", response_model=DesignStateResponse)
async def dispatch_action(
    session_id: str, action: ActionRequest, registry: Registry
) -> DesignStateResponse:
    """
    Apply one action to a session.

    Rejected actions return 4xx and leave the session unchanged.
    """
    store = registry.get(session_id)
    snapshot = store.dispatch(parse_action(action.to_payload()))
    return DesignStateResponse.from_snapshot(session_id, snapshot)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: str, registry: Registry) -> Response:
    """Close a session and discard its state."""
    registry.close(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
