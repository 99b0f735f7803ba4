"""Shapes of the accounts config file."""

from __future__ import annotations

from typing import List, TypedDict, Union


class TokenInfo(TypedDict, total=False):
    accessToken: str
    refreshToken: str
    expiresAt: str


class AccountAuth(TypedDict, total=False):
    clientId: str
    clientSecret: str
    scopes: List[str]
    tokenInfo: TokenInfo


class Account(TypedDict, total=False):
    name: str
    accountId: int
    env: str
    authType: str
    auth: AccountAuth
    apiKey: str
    personalAccessKey: str
    defaultMode: str
    sandboxAccountType: str
    parentAccountId: int


class CLIConfig(TypedDict, total=False):
    defaultAccount: Union[str, int]
    defaultMode: str
    httpTimeout: int
    allowUsageTracking: bool
    accounts: List[Account]
