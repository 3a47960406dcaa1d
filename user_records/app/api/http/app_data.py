from dataclasses import dataclass

from user_records.app.core.storage import UserStorage


@dataclass
class ApplicationDependencies:
    user_storage: UserStorage
