"""
Contracts (data models).

This folder defines the request/response shapes at the gateway's edges:
- the outbound checkout event and the normalized checkout result
- the outbound generation request, the approval verdict and decision details
- the inbound purchase update sent by the automation backend
- the interfaces of the collaborators the gateway consumes

Why this exists:
- Mock and real clients return the same shapes
- Services work with typed values, not with the automation backend's ad-hoc dicts
"""
