import base64

import pytest

from tankgame.services.game_service import game_service_obj

GUILD = 424242
ALICE = 7
BOB = 8
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def corner_spawn(monkeypatch):
    """Every join lands on the top left cell."""
    monkeypatch.setattr(game_service_obj, "coordinate_source", lambda width, height: (0, 0))


class TestGameAPI:

    def url(self, path=""):
        return f"/api/v1/guilds/{GUILD}{path}"

    def test_ping(self, client):
        response = client.get("/api/v1/ping")
        assert response.status_code == 200
        assert response.json()["message"] == "Pong!"

    def test_create_game(self, client):
        response = client.post(self.url("/game"), json={"name": "Tanks", "width": 10, "height": 9})
        assert response.status_code == 200
        data = response.json()
        assert data["guild_id"] == GUILD
        assert (data["name"], data["width"], data["height"]) == ("Tanks", 10, 9)
        assert data["message"] == "Created new game `Tanks` of size 10x9"

    def test_create_game_defaults(self, client):
        data = client.post(self.url("/game"), json={}).json()
        assert (data["name"], data["width"], data["height"]) == ("Game", 16, 16)

    def test_create_game_twice(self, client):
        client.post(self.url("/game"), json={"name": "First"})
        response = client.post(self.url("/game"), json={"name": "Second"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "GAME_EXISTS"
        assert "destroy it first" in response.json()["detail"]

    def test_create_undersized_game(self, client):
        response = client.post(self.url("/game"), json={"width": 4, "height": 16})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_BOARD_SIZE"

    def test_create_oversized_game(self, client):
        response = client.post(self.url("/game"), json={"width": 300})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_join_game(self, client):
        client.post(self.url("/game"), json={"width": 8, "height": 8})
        response = client.post(self.url("/players"), json={"user_id": ALICE})
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "You joined the game"
        assert (data["health"], data["actions"], data["range"]) == (3, 0, 1)
        assert 0 <= data["pos_x"] < 8 and 0 <= data["pos_y"] < 8

        response = client.post(self.url("/players"), json={"user_id": ALICE})
        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_JOINED"

    def test_join_without_game(self, client):
        response = client.post(self.url("/players"), json={"user_id": ALICE})
        assert response.status_code == 404
        assert response.json()["detail"] == "Game is not in progress"

    def test_move_flow(self, client, corner_spawn):
        client.post(self.url("/game"), json={"width": 8, "height": 8})
        client.post(self.url("/players"), json={"user_id": ALICE})

        response = client.post(self.url(f"/players/{ALICE}/move"), json={"direction": "3"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "OUT_OF_ACTIONS"

        client.post(self.url("/supply"), json={"amount": 2, "target": "all"})

        response = client.post(self.url(f"/players/{ALICE}/move"), json={"direction": "north"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "BLOCKED_BY_WALL"
        assert response.json()["detail"] == "Cannot move past a wall"

        response = client.post(self.url(f"/players/{ALICE}/move"), json={"direction": "3"})
        assert response.status_code == 200
        data = response.json()
        assert data["direction"] == "south-east"
        assert (data["pos_x"], data["pos_y"], data["actions"]) == (1, 1, 1)
        assert data["message"] == "Successfully moved, showing board"
        assert base64.b64decode(data["board"]["image_png"]).startswith(PNG_SIGNATURE)
        assert data["board"]["players"][0]["user_id"] == ALICE

    def test_move_invalid_direction(self, client):
        client.post(self.url("/game"), json={})
        client.post(self.url("/players"), json={"user_id": ALICE})
        response = client.post(self.url(f"/players/{ALICE}/move"), json={"direction": "east-west"})
        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_DIRECTION"
        assert data["detail"].startswith("Invalid direction:")

    def test_move_not_a_player(self, client):
        client.post(self.url("/game"), json={})
        response = client.post(self.url(f"/players/{BOB}/move"), json={"direction": "s"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Player is not in a game"

    def test_supply_named(self, client):
        client.post(self.url("/game"), json={})
        client.post(self.url("/players"), json={"user_id": ALICE})
        response = client.post(self.url("/supply"), json={
            "amount": "3",
            "target": [{"user_id": ALICE, "name": "alice"}, {"user_id": BOB, "name": "bob"}]
        })
        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 3
        assert data["updated"] == ["alice"]
        assert data["skipped"] == ["bob"]
        assert data["message"] == "Supply 3 actions to each complete: alice\nbob is not a current player"

    def test_supply_all_default_amount(self, client):
        client.post(self.url("/game"), json={})
        client.post(self.url("/players"), json={"user_id": ALICE})
        response = client.post(self.url("/supply"), json={"amount": 42, "target": "all"})
        data = response.json()
        assert data["amount"] == 1
        assert data["updated_count"] == 1
        assert data["message"] == "Supply 1 action to all is complete"

    def test_board(self, client):
        client.post(self.url("/game"), json={"name": "Board", "width": 8, "height": 8})
        client.post(self.url("/players"), json={"user_id": BOB})
        client.post(self.url("/players"), json={"user_id": ALICE})

        data = client.get(self.url("/board")).json()
        assert data["game_name"] == "Board"
        assert (data["width"], data["height"]) == (201, 201)
        assert data["filename"].startswith("board-") and data["filename"].endswith(".png")
        assert [p["user_id"] for p in data["players"]] == [ALICE, BOB]

        response = client.get(self.url("/board.png"))
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(PNG_SIGNATURE)

    def test_destroy_game(self, client):
        client.post(self.url("/game"), json={"name": "Doomed"})
        client.post(self.url("/players"), json={"user_id": ALICE})

        response = client.delete(self.url("/game"))
        assert response.status_code == 200
        assert response.json()["message"] == "Game destroyed: Doomed"
        assert response.json()["players_removed"] == 1

        response = client.get(self.url("/board"))
        assert response.status_code == 404

        response = client.delete(self.url("/game"))
        assert response.status_code == 404
        assert response.json()["detail"] == "No game exists to destroy"

    def test_supply_fractional_amount(self, client):
        client.post(self.url("/game"), json={})
        client.post(self.url("/players"), json={"user_id": ALICE})
        response = client.post(self.url("/supply"), json={"amount": 2.5, "target": "all"})
        assert response.status_code == 200
        assert response.json()["amount"] == 1

    def test_supply_all_keyword_any_case(self, client):
        client.post(self.url("/game"), json={})
        client.post(self.url("/players"), json={"user_id": ALICE})
        response = client.post(self.url("/supply"), json={"amount": 2, "target": " ALL "})
        assert response.status_code == 200
        assert response.json()["all_players"] is True
        assert response.json()["updated_count"] == 1

    def test_supply_unknown_keyword(self, client):
        client.post(self.url("/game"), json={})
        response = client.post(self.url("/supply"), json={"amount": 2, "target": "everyone"})
        assert response.status_code == 422

    @pytest.mark.parametrize("guild_id", [2**63, 2**64 - 1, -1])
    def test_guild_id_out_of_range(self, client, guild_id):
        response = client.post(f"/api/v1/guilds/{guild_id}/game", json={})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_largest_ids(self, client):
        guild_url = f"/api/v1/guilds/{2**63 - 1}"
        assert client.post(f"{guild_url}/game", json={}).status_code == 200
        response = client.post(f"{guild_url}/players", json={"user_id": 2**63 - 1})
        assert response.status_code == 200
        assert response.json()["user_id"] == 2**63 - 1

    def test_user_id_out_of_range(self, client):
        client.post(self.url("/game"), json={})
        response = client.post(self.url("/players"), json={"user_id": 2**64 - 1})
        assert response.status_code == 422

        response = client.post(self.url(f"/players/{2**63}/move"), json={"direction": "n"})
        assert response.status_code == 422

        response = client.post(self.url("/supply"), json={
            "amount": 1, "target": [{"user_id": 2**63, "name": "huge"}]
        })
        assert response.status_code == 422
