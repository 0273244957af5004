from sqlalchemy import Boolean, Date, Enum, Integer, String, Text
import enum

# qr_code is derived from the NIS at creation and never edited by hand
EXCLUDED_FIELDS = {"id", "created_at", "deactivated_at", "qr_code"}

FIELD_LABELS = {
    "nis": "NIS",
    "class": "Class",
    "birth_date": "Birth Date",
    "is_active": "Active",
}


def generate_schema_from_model(model, model_name):
    """
    Describe a model's editable columns so the client can render its form.
    Each entry carries name, label, required and an input type; enum columns
    also carry their options.
    """
    schema = []

    for column in model.__table__.columns:
        name = column.name
        if name in EXCLUDED_FIELDS:
            continue

        field_schema = {
            "name": name,
            "label": FIELD_LABELS.get(name, name.replace("_", " ").title()),
            "required": not column.nullable and column.default is None,
        }

        if isinstance(column.type, Enum):
            enum_class = column.type.enum_class
            field_schema["type"] = "select"
            if enum_class and issubclass(enum_class, enum.Enum):
                field_schema["options"] = [{"label": e.value, "value": e.value} for e in enum_class]
            else:
                field_schema["options"] = [{"label": v, "value": v} for v in column.type.enums]

        elif isinstance(column.type, Boolean):
            field_schema["type"] = "checkbox"

        elif isinstance(column.type, Date):
            field_schema["type"] = "date"

        elif isinstance(column.type, Text):
            field_schema["type"] = "textarea"

        elif isinstance(column.type, Integer):
            field_schema["type"] = "number"

        elif isinstance(column.type, String):
            field_schema["type"] = "text"
            if column.type.length:
                field_schema["maxLength"] = column.type.length

        else:
            field_schema["type"] = "text"

        if name == "nis":
            field_schema["immutable"] = True

        schema.append(field_schema)

    return {
        "model": model_name,
        "fields": schema,
    }
