from contact_api.services.contact import ContactService, RequestContext, SubmissionOutcome

__all__ = ["ContactService", "RequestContext", "SubmissionOutcome"]
