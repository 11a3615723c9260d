import os

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from controllers.users import (
    create_user,
    delete_user,
    get_user_by_email,
    get_user_by_id,
    update_password,
    update_user,
)
from core.auth import create_reset_token, create_session_token, jwt_bearer, read_reset_token
from core.errors import InternalError, NotFoundError, ValidationError
from core.mailer import MailDeliveryError, get_mailer
from core.media import MediaUploadError, get_media_store, store_upload
from database.database import get_db
from models.user import USER_ROLES
from schema.auth import ForgotPasswordRequest, LoginRequest, ResetPasswordRequest
from schema.user import serialize_user
from utils.file_processor import validate_image
from utils.state import State
from utils.token import InvalidOrExpiredToken, get_hashed_password, verify_password

router = APIRouter()


@router.post("/register", status_code=201)
async def register_user(
    email: str | None = Form(None),
    password: str | None = Form(None),
    name: str | None = Form(None),
    location: str | None = Form(None),
    phoneNumber: str | None = Form(None),
    role: str | None = Form(None),
    image: UploadFile | None = File(None),
    db=Depends(get_db),
    media_store=Depends(get_media_store),
):
    if not email or not password or not name or not location:
        raise ValidationError("All fields are required")
    role = role or "customer"
    if role not in USER_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(USER_ROLES)}")
    has_image = image is not None and bool(image.filename)
    if has_image:
        validate_image(image)
    try:
        if get_user_by_email(email, db):
            State.logger.error(f"Email already registered: {email}")
            raise ValidationError("Email already registered")
        user = create_user(
            email=email,
            hashed_password=get_hashed_password(password),
            name=name,
            location=location,
            phone_number=phoneNumber or None,
            role=role,
            db=db,
        )
        # Upload only once the row exists; a failed upload undoes the registration.
        if has_image:
            try:
                image_url = await store_upload(media_store, image)
            except MediaUploadError:
                delete_user(user, db)
                raise
            user = update_user(user, {"profile_image_url": image_url}, db)
        State.logger.info(f"Registered user {user.id}")
        return {
            "message": "Registered successfully",
            "token": create_session_token(user),
            "user": serialize_user(user),
        }
    except HTTPException:
        raise
    except MediaUploadError as e:
        State.logger.error(f"Profile image upload failed: {str(e)}")
        raise InternalError("Failed to upload image")
    except Exception as e:
        State.logger.error(f"An error occured while registering user: {str(e)}")
        raise InternalError("An error occured while registering user")


@router.post("/auth/login")
async def login_user(req: LoginRequest, db=Depends(get_db)):
    if not req.email or not req.password:
        raise ValidationError("Email and password are required")
    try:
        user = get_user_by_email(req.email, db)
        if not user or not verify_password(req.password, user.password):
            State.logger.error("Invalid credentials")
            raise ValidationError("Invalid credentials")
        return {"token": create_session_token(user), "user": serialize_user(user)}
    except HTTPException:
        raise
    except Exception as e:
        State.logger.error(f"An error occured while login: {str(e)}")
        raise InternalError("An error occured while login")


@router.get("/auth/profile")
async def get_profile(claims: dict = Depends(jwt_bearer), db=Depends(get_db)):
    try:
        user = get_user_by_id(claims["id"], db)
        if not user:
            raise NotFoundError("User not found")
        return serialize_user(user)
    except HTTPException:
        raise
    except Exception as e:
        State.logger.error(f"An error occured while fetching profile: {str(e)}")
        raise InternalError("An error occured while fetching profile")


@router.put("/auth/profile")
async def update_profile(
    name: str | None = Form(None),
    email: str | None = Form(None),
    phoneNumber: str | None = Form(None),
    image: UploadFile | None = File(None),
    claims: dict = Depends(jwt_bearer),
    db=Depends(get_db),
    media_store=Depends(get_media_store),
):
    updates = {}
    if name:
        updates["name"] = name
    if email:
        updates["email"] = email
    if phoneNumber:
        updates["phone_number"] = phoneNumber
    has_image = image is not None and bool(image.filename)
    if not updates and not has_image:
        raise ValidationError("No updates provided")
    try:
        user = get_user_by_id(claims["id"], db)
        if not user:
            raise NotFoundError("User not found")
        if email:
            user_with_email = get_user_by_email(email, db)
            if user_with_email and user_with_email.id != user.id:
                raise ValidationError("Email already in use")
        if has_image:
            updates["profile_image_url"] = await store_upload(media_store, image)
        user = update_user(user, updates, db)
        return serialize_user(user)
    except HTTPException:
        raise
    except MediaUploadError as e:
        State.logger.error(f"Profile image upload failed: {str(e)}")
        raise InternalError("Failed to upload image")
    except Exception as e:
        State.logger.error(f"An error occured while updating profile: {str(e)}")
        raise InternalError("An error occured while updating profile")


@router.post("/auth/forgot-password")
async def forgot_password(
    req: ForgotPasswordRequest, db=Depends(get_db), mailer=Depends(get_mailer)
):
    if not req.email:
        raise ValidationError("Email is required")
    try:
        user = get_user_by_email(req.email, db)
        if not user:
            raise NotFoundError("User not found")
        if mailer is None:
            raise InternalError("Mail provider is not configured")

        reset_token = create_reset_token(user.id)
        base_url = os.getenv("RESET_PASSWORD_URL", "http://localhost:3000/reset-password")
        reset_url = f"{base_url}?token={reset_token}"
        await run_in_threadpool(
            mailer.send,
            req.email,
            "Password Reset",
            f'<p>Reset your password:</p><a href="{reset_url}">{reset_url}</a>',
        )
        return {"message": "Reset link sent if user exists"}
    except HTTPException:
        raise
    except MailDeliveryError as e:
        State.logger.error(f"Failed to send reset email to {req.email}: {str(e)}")
        raise InternalError("Failed to send reset email")
    except Exception as e:
        State.logger.error(f"An error occured during forgot password: {str(e)}")
        raise InternalError("An error occured during forgot password")


@router.post("/auth/reset-password")
async def reset_password(req: ResetPasswordRequest, db=Depends(get_db)):
    if not req.token or not req.newPassword:
        raise ValidationError("Token and new password are required")
    try:
        user_id = read_reset_token(req.token)
    except InvalidOrExpiredToken as e:
        State.logger.warning(f"Rejected reset token: {str(e)}")
        raise ValidationError("Invalid or expired token")
    try:
        if not update_password(user_id, get_hashed_password(req.newPassword), db):
            raise ValidationError("Invalid or expired token")
        return {"message": "Password reset successful"}
    except HTTPException:
        raise
    except Exception as e:
        State.logger.error(f"An error occured while resetting password: {str(e)}")
        raise InternalError("An error occured while resetting password")
