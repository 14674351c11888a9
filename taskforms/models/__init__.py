from taskforms.models.audit_event import AuditEvent
from taskforms.models.form_definition import FormDefinition
from taskforms.models.form_definition_version import FormDefinitionVersion
from taskforms.models.form_field import FormField
from taskforms.models.form_submission import FormSubmission
from taskforms.models.master import FixedMasterEntry, MasterList
from taskforms.models.rbac import Role, UserRole
from taskforms.models.task import Task, TaskFormAttachment
from taskforms.models.user import User

__all__ = [ "AuditEvent", "FormDefinition", "FormDefinitionVersion",
           "FormField", "FormSubmission", "FixedMasterEntry", "MasterList",
           "Role", "UserRole", "Task", "TaskFormAttachment", "User" ]
