"""Tests for mnemonic endpoints."""
import json
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from models.mnemonic import Mnemonic
from services.mnemonic_import import EXAMPLE_IMPORT

COMMIT_COMMANDS: list[dict[str, Any]] = [
    {"command": "git add .", "inputs": []},
    {
        "command": "git commit",
        "inputs": [
            {"type": "text", "value": "wip"},
            {"type": "enter"},
            {"type": "key", "key": "down"},
        ],
    },
]


async def _create(
    client: AsyncClient,
    name: str,
    folder_id: int | None,
    commands: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": name, "commands": commands or COMMIT_COMMANDS}
    if folder_id is not None:
        payload["folderId"] = folder_id
    response = await client.post("/api/mnemonics", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_create_mnemonic(client: AsyncClient, folder_id: int) -> None:
    """Created mnemonics echo back their canonical commands."""
    mnemonic = await _create(client, "commit", folder_id)
    assert mnemonic["name"] == "commit"
    assert mnemonic["folderId"] == folder_id
    assert mnemonic["commands"] == COMMIT_COMMANDS
    assert set(mnemonic) == {
        "id", "userId", "folderId", "name", "commands", "createdAt", "updatedAt",
    }


async def test_create_mnemonic_normalizes_commands(
    client: AsyncClient, folder_id: int,
) -> None:
    """Commands are trimmed, blank ones dropped, inputs default to empty."""
    mnemonic = await _create(
        client,
        "tidy",
        folder_id,
        commands=[
            {"command": "  ls -la  "},
            {"command": "   ", "inputs": []},
            {"command": "pwd", "inputs": [{"type": "enter", "extra": 1}]},
        ],
    )
    assert mnemonic["commands"] == [
        {"command": "ls -la", "inputs": []},
        {"command": "pwd", "inputs": [{"type": "enter"}]},
    ]


@pytest.mark.parametrize(
    ("name", "valid"),
    [
        ("deploy-prod_2", True),
        ("a" * 50, True),
        ("Deploy", False),
        ("1abc", False),
        ("has space", False),
        ("a" * 51, False),
    ],
)
async def test_mnemonic_name_format(
    client: AsyncClient, folder_id: int, name: str, valid: bool,
) -> None:
    """Names start with a lowercase letter and use [a-z0-9-_], up to 50 chars."""
    response = await client.post(
        "/api/mnemonics",
        json={"name": name, "folderId": folder_id, "commands": COMMIT_COMMANDS},
    )
    if valid:
        assert response.status_code == 201
    else:
        assert response.status_code == 400
        assert "Mnemonic name must start with a lowercase letter" in response.json()["error"]


async def test_mnemonic_name_required(client: AsyncClient, folder_id: int) -> None:
    """Blank names get their own message."""
    response = await client.post(
        "/api/mnemonics",
        json={"name": "  ", "folderId": folder_id, "commands": COMMIT_COMMANDS},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "name: Mnemonic name cannot be empty"


@pytest.mark.parametrize(
    ("commands", "message"),
    [
        ([], "At least one command is required"),
        ([{"command": "  "}], "At least one command is required"),
        ("ls", "Commands must be an array"),
        ([{"cmd": "ls"}], "Invalid command at index 0"),
        (
            [{"command": "ls"}, {"command": "vim", "inputs": [{"type": "key", "key": "esc"}]}],
            "Invalid inputs for command at index 1",
        ),
        ([{"command": "ls", "inputs": [{"type": "text"}]}], "Invalid inputs for command at index 0"),
        ([{"command": "ls", "inputs": ["yes"]}], "Invalid inputs for command at index 0"),
    ],
)
async def test_invalid_commands_rejected(
    client: AsyncClient, folder_id: int, commands: Any, message: str,
) -> None:
    """Malformed commands are a 400 naming the problem."""
    response = await client.post(
        "/api/mnemonics",
        json={"name": "bad", "folderId": folder_id, "commands": commands},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("commands: ")
    assert message in body["error"]


async def test_session_create_requires_folder(client: AsyncClient) -> None:
    """The web portal always files mnemonics in a folder."""
    response = await client.post(
        "/api/mnemonics", json={"name": "commit", "commands": COMMIT_COMMANDS},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Folder ID is required"}


async def test_token_create_without_folder(token_client: AsyncClient) -> None:
    """The CLI may create unfiled mnemonics."""
    mnemonic = await _create(token_client, "commit", None)
    assert mnemonic["folderId"] is None


async def test_create_in_other_users_folder(
    other_client: AsyncClient, folder_id: int,
) -> None:
    """A folder owned by someone else is treated as missing."""
    response = await other_client.post(
        "/api/mnemonics",
        json={"name": "commit", "folderId": folder_id, "commands": COMMIT_COMMANDS},
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Folder not found"


async def test_duplicate_name_across_folders(client: AsyncClient, folder_id: int) -> None:
    """Names are unique per user, not per folder."""
    await _create(client, "commit", folder_id)
    home = (await client.post("/api/folders", json={"name": "Home"})).json()["data"]["id"]
    response = await client.post(
        "/api/mnemonics",
        json={"name": "commit", "folderId": home, "commands": COMMIT_COMMANDS},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "Mnemonic name already exists"


async def test_same_name_for_different_users(
    client: AsyncClient, other_client: AsyncClient, folder_id: int,
) -> None:
    """Different users may reuse a name."""
    await _create(client, "commit", folder_id)
    other_folder = (await other_client.post("/api/folders", json={"name": "Work"})).json()
    await _create(other_client, "commit", other_folder["data"]["id"])


async def test_list_folder_mnemonics(client: AsyncClient, folder_id: int) -> None:
    """Listing is per folder, newest first."""
    await _create(client, "first", folder_id)
    await _create(client, "second", folder_id)
    home = (await client.post("/api/folders", json={"name": "Home"})).json()["data"]["id"]
    await _create(client, "elsewhere", home)

    response = await client.get("/api/mnemonics", params={"folderId": folder_id})
    assert response.status_code == 200
    assert [m["name"] for m in response.json()["data"]] == ["second", "first"]


async def test_list_requires_folder_id(client: AsyncClient) -> None:
    """folderId is a required query parameter."""
    response = await client.get("/api/mnemonics")
    assert response.status_code == 400
    assert response.json()["error"] == "Folder ID is required"


async def test_list_is_session_only(token_client: AsyncClient) -> None:
    """Folder listing belongs to the web portal."""
    response = await token_client.get("/api/mnemonics", params={"folderId": 1})
    assert response.status_code == 401


async def test_get_by_name_with_token(
    client: AsyncClient, token_client: AsyncClient, folder_id: int,
) -> None:
    """The CLI fetches a mnemonic's commands by name."""
    await _create(client, "commit", folder_id)

    for path in ("/api/mnemonics/name/commit", "/api/mnemonics/commit"):
        response = await token_client.get(path)
        assert response.status_code == 200
        assert response.json()["data"] == {"name": "commit", "commands": COMMIT_COMMANDS}


async def test_get_by_name_missing(token_client: AsyncClient) -> None:
    """Unknown names are a 404."""
    response = await token_client.get("/api/mnemonics/name/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Mnemonic not found"}


async def test_get_by_name_is_token_only(client: AsyncClient, folder_id: int) -> None:
    """Fetch by name is a CLI endpoint."""
    await _create(client, "commit", folder_id)
    response = await client.get("/api/mnemonics/name/commit")
    assert response.status_code == 401


async def test_get_by_name_is_scoped_to_user(
    other_client: AsyncClient,
    client_factory: Any,
    client: AsyncClient,
    folder_id: int,
) -> None:
    """Another user's token cannot read the mnemonic."""
    await _create(client, "commit", folder_id)
    raw = (await other_client.post("/api/tokens", json={"name": "x"})).json()["data"]["token"]
    other_cli = await client_factory(None)
    response = await other_cli.get(
        "/api/mnemonics/name/commit", headers={"Authorization": f"Bearer {raw}"},
    )
    assert response.status_code == 404


async def test_legacy_commands_are_migrated_on_read(
    app: FastAPI, client: AsyncClient, token_client: AsyncClient,
) -> None:
    """Rows stored in older shapes are returned in the step-based shape."""
    user_id = (await client.get("/auth/session")).json()["data"]["id"]
    async with app.state.session_factory() as session:
        session.add_all([
            Mnemonic(user_id=user_id, name="plain", commands=["git status", "git push"]),
            Mnemonic(
                user_id=user_id,
                name="prompts",
                commands=[{"command": "npm init", "inputs": ["my-app", "1.0.0"]}],
            ),
        ])
        await session.commit()

    response = await token_client.get("/api/mnemonics/name/plain")
    assert response.json()["data"]["commands"] == [
        {"command": "git status", "inputs": []},
        {"command": "git push", "inputs": []},
    ]

    response = await token_client.get("/api/mnemonics/name/prompts")
    assert response.json()["data"]["commands"] == [
        {
            "command": "npm init",
            "inputs": [
                {"type": "text", "value": "my-app"},
                {"type": "text", "value": "1.0.0"},
            ],
        },
    ]


async def test_update_mnemonic(client: AsyncClient, folder_id: int) -> None:
    """PUT replaces the name and the full command list."""
    mnemonic = await _create(client, "commit", folder_id)
    response = await client.put(
        f"/api/mnemonics/{mnemonic['id']}",
        json={"name": "push", "commands": [{"command": "git push"}]},
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["name"] == "push"
    assert updated["commands"] == [{"command": "git push", "inputs": []}]
    assert updated["folderId"] == folder_id


async def test_update_mnemonic_with_token(
    client: AsyncClient, token_client: AsyncClient, folder_id: int,
) -> None:
    """The CLI can edit mnemonics filed by the portal."""
    mnemonic = await _create(client, "commit", folder_id)
    response = await token_client.put(
        f"/api/mnemonics/{mnemonic['id']}",
        json={"name": "commit", "commands": [{"command": "git commit -a"}]},
    )
    assert response.status_code == 200


async def test_update_mnemonic_name_conflict(client: AsyncClient, folder_id: int) -> None:
    """Renaming onto another mnemonic's name is a conflict."""
    await _create(client, "commit", folder_id)
    push = await _create(client, "push", folder_id)
    response = await client.put(
        f"/api/mnemonics/{push['id']}",
        json={"name": "commit", "commands": COMMIT_COMMANDS},
    )
    assert response.status_code == 409


async def test_update_other_users_mnemonic(
    client: AsyncClient, other_client: AsyncClient, folder_id: int,
) -> None:
    """Another user's mnemonic looks missing."""
    mnemonic = await _create(client, "commit", folder_id)
    response = await other_client.put(
        f"/api/mnemonics/{mnemonic['id']}",
        json={"name": "commit", "commands": COMMIT_COMMANDS},
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Mnemonic not found"


async def test_delete_mnemonic(
    client: AsyncClient, token_client: AsyncClient, folder_id: int,
) -> None:
    """Deleted mnemonics can no longer be fetched."""
    mnemonic = await _create(client, "commit", folder_id)
    response = await client.delete(f"/api/mnemonics/{mnemonic['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == {"message": "Mnemonic deleted successfully"}

    response = await token_client.get("/api/mnemonics/name/commit")
    assert response.status_code == 404

    response = await client.delete(f"/api/mnemonics/{mnemonic['id']}")
    assert response.status_code == 404


async def test_import_example(anon_client: AsyncClient) -> None:
    """The example import document is public."""
    response = await anon_client.get("/api/mnemonics/import/example")
    assert response.status_code == 200
    assert response.json()["data"] == EXAMPLE_IMPORT


async def test_export_then_import(client: AsyncClient, folder_id: int) -> None:
    """An exported document imports as an identical mnemonic."""
    mnemonic = await _create(client, "commit", folder_id)
    response = await client.get(f"/api/mnemonics/{mnemonic['id']}/export")
    assert response.status_code == 200
    exported = response.json()["data"]
    assert exported == {"commands": COMMIT_COMMANDS}

    response = await client.post(
        "/api/mnemonics/import",
        json={"name": "commit-copy", "folderId": folder_id, "data": json.dumps(exported)},
    )
    assert response.status_code == 201
    assert response.json()["data"]["commands"] == COMMIT_COMMANDS


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ("not json", "Invalid JSON"),
        ("[1, 2]", "Invalid JSON: Root must be an object"),
        ('{"commands": "ls"}', 'Invalid format: "commands" must be an array'),
        ('{"commands": []}', "Invalid format: At least one command is required"),
        ('{"commands": [{"command": "ls"}]}', "Invalid command at index 0"),
    ],
)
async def test_import_rejects_bad_documents(
    client: AsyncClient, folder_id: int, data: str, message: str,
) -> None:
    """Import errors describe what is wrong with the document."""
    response = await client.post(
        "/api/mnemonics/import",
        json={"name": "imported", "folderId": folder_id, "data": data},
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith(message)


async def test_export_other_users_mnemonic(
    client: AsyncClient, other_client: AsyncClient, folder_id: int,
) -> None:
    """Exports are scoped to the owner."""
    mnemonic = await _create(client, "commit", folder_id)
    response = await other_client.get(f"/api/mnemonics/{mnemonic['id']}/export")
    assert response.status_code == 404
