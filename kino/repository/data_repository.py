"""Repository layer responsible for all database access."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from kino.domain.models import (
    Movie,
    PriceAdjustment,
    Reservation,
    Screening,
    Seat,
    SeatPricing,
    User,
)
from kino.utils.config import Settings, get_settings
from kino.utils.logger import get_logger


logger = get_logger(__name__)


_SEAT_SELECT = """
    SELECT
        s.id,
        s.theater_name,
        s.row_number,
        s.seat_number,
        sp.id AS pricing_id,
        sp.name AS pricing_name,
        sp.price AS pricing_price
    FROM Seats AS s
    INNER JOIN SeatPricings AS sp ON sp.id = s.seat_pricing_id
"""

_SCREENING_SELECT = """
    SELECT
        sc.id,
        sc.theater_name,
        sc.starts_at,
        sc.is_3d,
        m.id AS movie_id,
        m.title AS movie_title,
        m.runtime_minutes
    FROM Screenings AS sc
    INNER JOIN Movies AS m ON m.id = sc.movie_id
"""


def _row_to_seat(row: sqlite3.Row) -> Seat:
    return Seat(
        seat_id=int(row["id"]),
        theater_name=str(row["theater_name"]),
        row_number=int(row["row_number"]),
        seat_number=int(row["seat_number"]),
        pricing=SeatPricing(
            pricing_id=int(row["pricing_id"]),
            name=str(row["pricing_name"]),
            price=Decimal(str(row["pricing_price"])),
        ),
    )


def _row_to_screening(row: sqlite3.Row) -> Screening:
    return Screening(
        screening_id=int(row["id"]),
        movie=Movie(
            movie_id=int(row["movie_id"]),
            title=str(row["movie_title"]),
            runtime_minutes=int(row["runtime_minutes"]),
        ),
        theater_name=str(row["theater_name"]),
        starts_at=str(row["starts_at"]),
        is_3d=bool(row["is_3d"]),
    )


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Users (
                        username TEXT PRIMARY KEY,
                        email TEXT NOT NULL UNIQUE,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Movies (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        title TEXT NOT NULL,
                        runtime_minutes INTEGER NOT NULL CHECK (runtime_minutes > 0)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS SeatPricings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL UNIQUE,
                        price TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Seats (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        theater_name TEXT NOT NULL,
                        row_number INTEGER NOT NULL CHECK (row_number > 0),
                        seat_number INTEGER NOT NULL CHECK (seat_number > 0),
                        seat_pricing_id INTEGER NOT NULL,
                        UNIQUE (theater_name, row_number, seat_number),
                        FOREIGN KEY (seat_pricing_id) REFERENCES SeatPricings(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Screenings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        movie_id INTEGER NOT NULL,
                        theater_name TEXT NOT NULL,
                        starts_at TEXT NOT NULL,
                        is_3d INTEGER NOT NULL DEFAULT 0 CHECK (is_3d IN (0,1)),
                        FOREIGN KEY (movie_id) REFERENCES Movies(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS PriceAdjustments (
                        name TEXT PRIMARY KEY,
                        adjustment TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Reservations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        username TEXT NOT NULL,
                        screening_id INTEGER NOT NULL,
                        created_at TEXT NOT NULL,
                        FOREIGN KEY (username) REFERENCES Users(username),
                        FOREIGN KEY (screening_id) REFERENCES Screenings(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ReservationSeats (
                        reservation_id INTEGER NOT NULL,
                        seat_id INTEGER NOT NULL,
                        PRIMARY KEY (reservation_id, seat_id),
                        FOREIGN KEY (reservation_id) REFERENCES Reservations(id),
                        FOREIGN KEY (seat_id) REFERENCES Seats(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_screening
                    ON Reservations(screening_id);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_username
                    ON Reservations(username);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_data(self) -> None:
        """Seed a small cinema only when no movies exist yet."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("SELECT COUNT(*) AS count FROM Movies;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo data already present; skipping seed")
                    return

                cursor.executemany(
                    "INSERT INTO Users (username, email) VALUES (?, ?);",
                    [
                        ("user1", "user1@kino.dk"),
                        ("user2", "user2@kino.dk"),
                        ("admin", "admin@kino.dk"),
                    ],
                )

                cursor.executemany(
                    "INSERT INTO SeatPricings (name, price) VALUES (?, ?);",
                    [
                        ("cowboy", "80.00"),
                        ("standard", "100.00"),
                        ("premium", "120.00"),
                    ],
                )
                cursor.execute("SELECT id, name FROM SeatPricings;")
                pricing_ids = {str(row["name"]): int(row["id"]) for row in cursor.fetchall()}

                seat_rows = []
                for theater_name, row_count, seats_per_row in (
                    ("Sal 1", 10, 12),
                    ("Sal 2", 6, 10),
                ):
                    for row_number in range(1, row_count + 1):
                        if row_number <= 2:
                            tier = "cowboy"
                        elif row_number >= row_count - 1:
                            tier = "premium"
                        else:
                            tier = "standard"
                        for seat_number in range(1, seats_per_row + 1):
                            seat_rows.append(
                                (theater_name, row_number, seat_number, pricing_ids[tier])
                            )
                cursor.executemany(
                    """
                    INSERT INTO Seats (theater_name, row_number, seat_number, seat_pricing_id)
                    VALUES (?, ?, ?, ?);
                    """,
                    seat_rows,
                )

                cursor.executemany(
                    "INSERT INTO Movies (title, runtime_minutes) VALUES (?, ?);",
                    [
                        ("Dune: Part Two", 166),
                        ("Inside Out 2", 96),
                        ("Oppenheimer", 180),
                    ],
                )
                cursor.execute("SELECT id FROM Movies ORDER BY id ASC;")
                movie_ids = [int(row["id"]) for row in cursor.fetchall()]

                first_day = datetime.now(timezone.utc).replace(
                    hour=18, minute=0, second=0, microsecond=0
                ) + timedelta(days=1)
                screening_rows = []
                for offset, movie_id in enumerate(movie_ids):
                    starts_at = first_day + timedelta(hours=3 * offset)
                    screening_rows.append((movie_id, "Sal 1", starts_at.isoformat(), 0))
                    screening_rows.append(
                        (movie_id, "Sal 2", (starts_at + timedelta(days=1)).isoformat(), 1)
                    )
                cursor.executemany(
                    """
                    INSERT INTO Screenings (movie_id, theater_name, starts_at, is_3d)
                    VALUES (?, ?, ?, ?);
                    """,
                    screening_rows,
                )

                cursor.executemany(
                    "INSERT OR IGNORE INTO PriceAdjustments (name, adjustment) VALUES (?, ?);",
                    [
                        ("smallGroup", "1.10"),
                        ("largeGroup", "0.85"),
                        ("fee3D", "2.00"),
                        ("feeRuntime", "1.50"),
                    ],
                )
                conn.commit()
            logger.info(
                "Demo seed completed with %s seats and %s screenings",
                len(seat_rows),
                len(screening_rows),
            )
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc

    def get_user(self, username: str) -> Optional[User]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT username, email FROM Users WHERE username = ?;",
                (username,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return User(username=str(row["username"]), email=str(row["email"]))

    def create_user(self, username: str, email: str) -> User:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO Users (username, email) VALUES (?, ?);",
                (username, email),
            )
            conn.commit()
        return User(username=username, email=email)

    def create_movie(self, title: str, runtime_minutes: int) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO Movies (title, runtime_minutes) VALUES (?, ?);",
                (title, runtime_minutes),
            )
            conn.commit()
            return int(cursor.lastrowid)

    def create_screening(
        self,
        movie_id: int,
        theater_name: str,
        starts_at: str,
        is_3d: bool,
    ) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Screenings (movie_id, theater_name, starts_at, is_3d)
                VALUES (?, ?, ?, ?);
                """,
                (movie_id, theater_name, starts_at, int(is_3d)),
            )
            conn.commit()
            return int(cursor.lastrowid)

    def get_screening(self, screening_id: int) -> Optional[Screening]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"{_SCREENING_SELECT} WHERE sc.id = ?;", (screening_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_screening(row)

    def get_seat(self, seat_id: int) -> Optional[Seat]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"{_SEAT_SELECT} WHERE s.id = ?;", (seat_id,))
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_seat(row)

    def get_seats_by_ids(self, seat_ids: Sequence[int]) -> List[Seat]:
        """Return the seats that exist among ``seat_ids``; unmatched ids are omitted."""
        unique_ids = sorted({int(seat_id) for seat_id in seat_ids})
        if not unique_ids:
            return []
        placeholders = ",".join("?" for _ in unique_ids)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"{_SEAT_SELECT} WHERE s.id IN ({placeholders}) ORDER BY s.id ASC;",
                tuple(unique_ids),
            )
            return [_row_to_seat(row) for row in cursor.fetchall()]

    def list_price_adjustments(self) -> List[PriceAdjustment]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name, adjustment FROM PriceAdjustments ORDER BY name ASC;")
            return [
                PriceAdjustment(
                    name=str(row["name"]),
                    adjustment=Decimal(str(row["adjustment"])),
                )
                for row in cursor.fetchall()
            ]

    def upsert_price_adjustment(self, name: str, adjustment: Decimal) -> PriceAdjustment:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO PriceAdjustments (name, adjustment)
                VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET adjustment = excluded.adjustment;
                """,
                (name, str(adjustment)),
            )
            conn.commit()
        return PriceAdjustment(name=name, adjustment=adjustment)

    def delete_price_adjustment(self, name: str) -> None:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM PriceAdjustments WHERE name = ?;", (name,))
            conn.commit()

    def create_reservation(
        self,
        username: str,
        screening_id: int,
        seat_ids: Iterable[int],
    ) -> Reservation:
        """Insert the reservation row and its seat links in one transaction."""
        unique_seat_ids = tuple(sorted({int(seat_id) for seat_id in seat_ids}))
        created_at = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Reservations (username, screening_id, created_at)
                VALUES (?, ?, ?);
                """,
                (username, screening_id, created_at),
            )
            reservation_id = int(cursor.lastrowid)
            cursor.executemany(
                "INSERT INTO ReservationSeats (reservation_id, seat_id) VALUES (?, ?);",
                [(reservation_id, seat_id) for seat_id in unique_seat_ids],
            )
            conn.commit()
        return Reservation(
            reservation_id=reservation_id,
            username=username,
            screening_id=screening_id,
            seat_ids=unique_seat_ids,
            created_at=created_at,
        )

    def _load_reservations(self, where_clause: str, params: tuple) -> List[Reservation]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT id, username, screening_id, created_at
                FROM Reservations
                {where_clause}
                ORDER BY id ASC;
                """,
                params,
            )
            rows = cursor.fetchall()
            if not rows:
                return []

            reservation_ids = [int(row["id"]) for row in rows]
            placeholders = ",".join("?" for _ in reservation_ids)
            cursor.execute(
                f"""
                SELECT reservation_id, seat_id
                FROM ReservationSeats
                WHERE reservation_id IN ({placeholders})
                ORDER BY seat_id ASC;
                """,
                tuple(reservation_ids),
            )
            seats_by_reservation: dict[int, list[int]] = {}
            for link in cursor.fetchall():
                seats_by_reservation.setdefault(int(link["reservation_id"]), []).append(
                    int(link["seat_id"])
                )

        return [
            Reservation(
                reservation_id=int(row["id"]),
                username=str(row["username"]),
                screening_id=int(row["screening_id"]),
                seat_ids=tuple(seats_by_reservation.get(int(row["id"]), [])),
                created_at=str(row["created_at"]),
            )
            for row in rows
        ]

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        reservations = self._load_reservations("WHERE id = ?", (reservation_id,))
        return reservations[0] if reservations else None

    def list_reservations(self) -> List[Reservation]:
        return self._load_reservations("", ())

    def list_reservations_by_screening(self, screening_id: int) -> List[Reservation]:
        return self._load_reservations("WHERE screening_id = ?", (screening_id,))

    def list_reservations_by_username(self, username: str) -> List[Reservation]:
        return self._load_reservations("WHERE username = ?", (username,))

    def count_reservations(self) -> int:
        """Return persisted reservation count for diagnostics and tests."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Reservations;")
            return int(cursor.fetchone()["count"])
