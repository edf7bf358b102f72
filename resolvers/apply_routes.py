from __future__ import annotations

from engine.errors import TemplateValidationError
from resolvers.registry import Resolver, ResolverRequest
from services.container import Services


def register_apply_routes(resolver: Resolver, services: Services) -> None:
    """Create Issue prefill, template lookup, and apply-to-existing-issue."""
    prefill = services.prefill

    @resolver.define("getPrefillForCreateIssue")
    def get_prefill_for_create_issue(req: ResolverRequest):
        # payload: { projectKey, issueType?, currentSummary?, currentDescription? }
        return prefill.prefill_for_create_issue(
            req.payload.get("projectKey"),
            req.payload.get("issueType"),
            req.payload.get("currentSummary", ""),
            req.payload.get("currentDescription", ""),
        )

    @resolver.define("findApplicableTemplate")
    def find_applicable_template(req: ResolverRequest):
        if not req.payload.get("projectKey"):
            raise TemplateValidationError("projectKey is required")
        return prefill.find_match(req.payload["projectKey"], req.payload.get("issueType"))

    @resolver.define("getTemplateDescription")
    def get_template_description(req: ResolverRequest):
        return prefill.template_description(req.payload.get("templateId") or req.payload.get("id"))

    @resolver.define("applyTemplateToIssue")
    def apply_template_to_issue(req: ResolverRequest):
        return services.apply.apply_template_to_issue(
            req.payload.get("templateId"),
            req.payload.get("issueKey"),
            req.principal,
        )
