from marshmallow import Schema, fields, pre_load, validates, ValidationError, EXCLUDE


def _strip(v):
    return v.strip() if isinstance(v, str) else v

def _norm_lower(v):
    return v.strip().lower() if isinstance(v, str) else v


class UserRegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(required=True, data_key="fullName")
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("username", "email"):
            if key in data:
                data[key] = _norm_lower(data[key])
        if "fullName" in data:
            data["fullName"] = _strip(data["fullName"])
        return data

    @validates("username")
    def validate_username(self, value, **kwargs):
        if not value:
            raise ValidationError("Field may not be blank.")

    @validates("full_name")
    def validate_full_name(self, value, **kwargs):
        if not value:
            raise ValidationError("Field may not be blank.")

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("Field may not be blank.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("username", "email"):
            value = _norm_lower(data.get(key))
            data[key] = value or None
        return data


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar_url = fields.String(data_key="avatar")
    cover_image_url = fields.String(data_key="coverImage")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class TokenPairSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")
