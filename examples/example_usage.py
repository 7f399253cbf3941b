"""Example: drive the account service layer directly, without Flask.

Controllers are a thin layer; the flows live in AccountService.
"""

import importlib
import logging

from config import get_settings_module

from account_service.container import build_container


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)
    for user in container.account_service.list_users():
        print(user.to_public_dict())


if __name__ == "__main__":
    main()
