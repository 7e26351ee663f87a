# Catálogo de mensajes expuestos al cliente. El texto es parte del contrato del API.

INTERNAL_SERVER_ERROR = "Internal server error. Contact with the administrator"


class AuthMessagesError:
    USER_NOT_FOUND = "User not found"
    USER_IS_NOT_ACTIVE = "User is not active"
    USER_BLOCKED = "User blocked, too many failed login attempts. Contact with the administrator"
    PASSWORD_OR_EMAIL_INVALID = "Email or password invalid"
    USER_TOKEN_USED = "Token already used"
    USER_MAIL_DIFFERENT = "The email does not match the token"
    TOKEN_INVALID = "Token inválido"
    TOKEN_PURPOSE_INVALID = "Token not valid for this operation"
    REFRESH_INVALID = "Token invalido"
    UNAUTHORIZED = "No autenticado"
    FORBIDDEN = "Insufficient role"


class AuthMessages:
    USER_VERIFIED = "Cuenta verificada con éxito"
    FORGOT_PASSWORD_SENT = "Se envió un correo para restablecer la contraseña"
    PASSWORD_CHANGED = "Contraseña actualizada con éxito"


class UserMessagesError:
    USER_NOT_FOUND = "User not found"
    USER_ALREADY_EXIST = "Not possible run operation, user already exist"
    USER_PASSWORD_NOT_MATCH = "Passwords do not match"
    USER_PASSWORD_NOT_MATCH_OLD = "Old password does not match"
    ROL_NOT_FOUND = "Rol not found"
    USER_NOT_DELETED = "Oops... There was an error deleting the user. Please try again later."
    USER_NOT_RESTORED = "Oops... There was an error restoring the user. Please try again later."


class UserMessages:
    USER_CREATED = "Usuario creado con éxito, revisa tu correo para activar la cuenta"
    USER_UPDATED = "Usuario actualizado con éxito"
    USER_REMOVED = "Usuario eliminado con éxito"
    USER_RESTORED = "Usuario restaurado con éxito"


class RolMessagesError:
    ROL_ALREADY_EXISTS = "Not possible run operation, rol already exist"
    ROL_NOT_FOUND = "Rol not found"
    ROL_NOT_DELETED = "Ups... Hubo un error al borrar el rol. Por favor, inténtelo de nuevo más tarde"
    ROL_NOT_RESTORED = "Ups... Hubo un error al restaurar el rol. Por favor, inténtelo de nuevo más tarde"
    ROL_NOT_UPDATED = "Ups... Hubo un error al crear o editar el rol. Por favor, inténtelo de nuevo más tarde"


class RolMessages:
    ROL_CREATED = "Rol creado con éxito"
    ROL_UPDATED = "Rol actualizado con éxito"
    ROL_REMOVED = "Rol eliminado con éxito"
    ROL_RESTORED = "Rol restaurado con éxito"


class CategoryMessagesError:
    CATEGORY_NOT_FOUND = "Category not found"
    SUBCATEGORY_NOT_FOUND = "Subcategory not found"
    CATEGORY_NOT_EXIST = "Category not exists"
    CATEGORY_NOT_FOUND_OR_NOT_ACTIVE = "Category not found or not active"
    CATEGORY_ALREADY_EXIST = "Not possible run operation, category already exist"
    SUBCATEGORY_ALREADY_EXIST = "Not possible run operation, subcategory already exist"
    CATEGORY_NOT_UPDATED = "Oops... There was an error updating the category. Please try again later."
    CATEGORY_NOT_DELETED = "Oops... There was an error deleting the category. Please try again later."
    CATEGORY_NOT_RESTORED = "Oops... There was an error restoring the category. Please try again later."
    INVALID_TYPE = "Type is invalid"


class CategoryMessages:
    CATEGORY_CREATED = "Categoría creada con éxito"
    SUBCATEGORY_CREATED = "Subcategoría creada con éxito"
    SUBCATEGORY_UPDATED = "Subcategoría actualizada con éxito"
    CATEGORY_UPDATED = "Categoría actualizada con éxito"
    CATEGORY_ACTIVED = "Categoria o subcategoria activada con éxito"
    CATEGORY_DESACTIVED = "Categoria o subcategoria desactivada con éxito"
    CATEGORY_REMOVED = "Categoría eliminada con éxito"
    SUBCATEGORY_REMOVED = "Subcategoría eliminada con éxito"
    CATEGORY_RESTORED = "Categoría o subcategoria restaurada con éxito"
    SUBCATEGORY_RESTORED = "Subcategoria restaurada con éxito"


class PriorityMessagesError:
    PRIORITY_NOT_FOUND = "Priority not found"
    PRIORITY_ALREADY_EXIST = "Not possible run operation, priority already exist"
    INVALID_STATUS = "Status is invalid"
    PRIORITY_NOT_UPDATED = "Oops... There was an error updating the priority. Please try again later."
    PRIORITY_NOT_DELETED = "Oops... There was an error deleting the priority. Please try again later."
    PRIORITY_NOT_RESTORED = "Oops... There was an error restoring the priority. Please try again later."


class PriorityMessages:
    PRIORITY_CREATED = "Prioridad creada con éxito"
    PRIORITY_UPDATED = "Prioridad actualizada con éxito"
    PRIORITY_ACTIVED = "Prioridad activada con éxito"
    PRIORITY_DESACTIVED = "Prioridad desactivada con éxito"
    PRIORITY_REMOVED = "Prioridad eliminada con éxito"
    PRIORITY_RESTORED = "Prioridad restaurada con éxito"


class TicketErrorMessages:
    TICKET_NOT_FOUND = "Ticket not found"
    TICKET_ERROR = "Oops... There were problems creating the ticket. Please try again later"
    TICKET_NOT_UPDATED = "Oops... There was an error updating the ticket. Please try again later."
    TICKET_NOT_DELETED = "Oops... There was an error deleting the ticket. Please try again later."
    TICKET_NOT_RESTORED = "Oops... There was an error restoring the ticket. Please try again later."


class TicketsMessages:
    TICKET_CREATED = "Ticket creado con éxito"
    TICKET_CHANGE_STATUS = "Estado del ticket actualizado con éxito"
    TICKET_ASSIGNED = "Técnico asignado con éxito"
    TICKET_REMOVED = "Ticket eliminado con éxito"
    TICKET_RESTORED = "Ticket restaurado con éxito"


class MailMessagesError:
    MAIL_NOT_CONFIGURED = "Servicio de correo no configurado"
    MAIL_NOT_SENT = "No fue posible enviar el correo. Inténtelo de nuevo más tarde"
