import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from jewellery.core.security import create_access_token, hash_password, verify_password
from jewellery.db.repository import GenericRepository
from jewellery.models.entities import User, UserRoles
from jewellery.models.schemas import (
    ApiResponse, AuthResponseDto, LoginDto, UserDto, UserResponseDto,
)
from jewellery.services.email_service import EmailService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.users = GenericRepository(User, db)
        self.email_service = email_service or EmailService()

    def _find_by_email(self, email: str) -> Optional[User]:
        return self.users.first(func.lower(User.email) == email.strip().lower())

    def register(self, user_dto: UserDto) -> ApiResponse[AuthResponseDto]:
        try:
            if self._find_by_email(user_dto.email):
                return ApiResponse[AuthResponseDto].error_response(
                    "Registration failed", ["Email already exists"]
                )

            if user_dto.role and user_dto.role not in UserRoles.VALID_ROLES:
                return ApiResponse[AuthResponseDto].error_response(
                    "Invalid role", [f"Valid roles are: {', '.join(UserRoles.VALID_ROLES)}"]
                )

            user = User(
                first_name=user_dto.first_name,
                last_name=user_dto.last_name,
                email=user_dto.email,
                phone_number=user_dto.phone_number,
                password_hash=hash_password(user_dto.password),
                role=user_dto.role or UserRoles.USER,
            )
            user = self.users.add(user)
            logger.info(f"Registered user {user.id} with role {user.role}")

            self.email_service.send_welcome_email(user.email, user.first_name)
            return ApiResponse[AuthResponseDto].success_response(
                self._auth_response(user), "Registration successful"
            )
        except Exception as e:
            self.db.rollback()
            logger.exception("Registration failed")
            return ApiResponse[AuthResponseDto].error_response("Registration failed", [str(e)])

    def login(self, login_dto: LoginDto) -> ApiResponse[AuthResponseDto]:
        try:
            user = self._find_by_email(login_dto.email)
            # same answer for unknown email and wrong password
            if user is None or not verify_password(login_dto.password, user.password_hash):
                return ApiResponse[AuthResponseDto].error_response(
                    "Login failed", ["Invalid email or password"]
                )
            return ApiResponse[AuthResponseDto].success_response(
                self._auth_response(user), "Login successful"
            )
        except Exception as e:
            logger.exception("Login failed")
            return ApiResponse[AuthResponseDto].error_response("Login failed", [str(e)])

    def get_user_by_id(self, user_id: int) -> ApiResponse[UserResponseDto]:
        try:
            user = self.users.get_by_id(user_id)
            if user is None:
                return ApiResponse[UserResponseDto].error_response("User not found")
            return ApiResponse[UserResponseDto].success_response(UserResponseDto.model_validate(user))
        except Exception as e:
            logger.exception(f"Error retrieving user {user_id}")
            return ApiResponse[UserResponseDto].error_response("Error retrieving user", [str(e)])

    def get_all_users(self) -> ApiResponse[List[UserResponseDto]]:
        try:
            users = [UserResponseDto.model_validate(u) for u in self.users.get_all()]
            return ApiResponse[List[UserResponseDto]].success_response(users)
        except Exception as e:
            logger.exception("Error retrieving users")
            return ApiResponse[List[UserResponseDto]].error_response("Error retrieving users", [str(e)])

    def check_email_exists(self, email: str) -> ApiResponse[bool]:
        try:
            return ApiResponse[bool].success_response(self._find_by_email(email) is not None)
        except Exception as e:
            logger.exception("Error checking email")
            return ApiResponse[bool].error_response("Error checking email", [str(e)])

    def ensure_admin(self, email: str, password: str) -> User:
        """Create the bootstrap admin account unless the email is already registered."""
        user = self._find_by_email(email)
        if user is not None:
            return user
        user = User(
            first_name="Admin",
            last_name="User",
            email=email,
            password_hash=hash_password(password),
            role=UserRoles.ADMIN,
        )
        logger.info(f"Creating bootstrap admin {email}")
        return self.users.add(user)

    def _auth_response(self, user: User) -> AuthResponseDto:
        return AuthResponseDto(
            token=create_access_token(user),
            user=UserResponseDto.model_validate(user),
        )
