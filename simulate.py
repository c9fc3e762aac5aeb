"""
Simple simulation script.

Drives a running server the way the chat bot would: creates a game, joins a
handful of users, hands out action points and moves everyone at random.
"""

import random
import sys
import time

import requests

DIRECTIONS = ["8", "9", "6", "3", "2", "1", "4", "7", "north-east", "dl", "up", "w"]


def main():
    BASE_URL = "http://localhost:8000/api/v1"
    GUILD_ID = int(time.time())
    NUM_PLAYERS = 5
    NUM_ROUNDS = 10

    print("=== Tank Game Simulation ===\n")
    guild_url = f"{BASE_URL}/guilds/{GUILD_ID}"

    response = requests.post(f"{guild_url}/game", json={"name": "Simulation", "width": 12, "height": 10})
    if response.status_code != 200:
        print(f"Failed to create game: {response.text}")
        sys.exit(1)
    print(response.json()["message"])

    # Join players
    print(f"\nJoining {NUM_PLAYERS} players...")
    players = []
    for i in range(NUM_PLAYERS):
        user_id = 1000 + i
        response = requests.post(f"{guild_url}/players", json={"user_id": user_id})
        if response.status_code == 200:
            data = response.json()
            players.append(user_id)
            print(f"  Player {user_id} joined at ({data['pos_x']}, {data['pos_y']})")
        else:
            print(f"  Player {user_id} failed to join: {response.json()['detail']}")

    if not players:
        print("X Nobody joined")
        sys.exit(1)

    stats = {p: {"moves": 0, "walls": 0} for p in players}

    for round_num in range(NUM_ROUNDS):
        response = requests.post(f"{guild_url}/supply", json={"amount": 2, "target": "all"})
        print(f"\nRound {round_num + 1}: {response.json()['message']}")

        for user_id in players:
            for _ in range(2):
                direction = random.choice(DIRECTIONS)
                response = requests.post(
                    f"{guild_url}/players/{user_id}/move",
                    json={"direction": direction}
                )
                if response.status_code == 200:
                    data = response.json()
                    stats[user_id]["moves"] += 1
                    print(f"  {user_id} moved {data['direction']} to ({data['pos_x']}, {data['pos_y']})")
                else:
                    error = response.json()
                    if error["error_code"] == "BLOCKED_BY_WALL":
                        stats[user_id]["walls"] += 1
                    print(f"  {user_id} could not move {direction}: {error['detail']}")

    # Display results
    print("\n=== Results ===\n")
    for user_id, player_stats in stats.items():
        print(f"  Player {user_id}: {player_stats['moves']} moves, {player_stats['walls']} walls hit")

    response = requests.get(f"{guild_url}/board.png")
    if response.status_code == 200:
        filename = f"board-{GUILD_ID}.png"
        with open(filename, "wb") as f:
            f.write(response.content)
        print(f"\nBoard saved to {filename}")

    response = requests.delete(f"{guild_url}/game")
    print(response.json()["message"])

    print("\n Simulation complete!")


if __name__ == "__main__":
    main()
