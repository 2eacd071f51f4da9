#!/usr/bin/env python3
"""
Database Seed Script

Populates the catalogue with sample books for development.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py

    # Keep existing books and only add missing ones
    python scripts/seed_data.py --keep

This script:
1. Connects to the database using app settings
2. Clears existing books and their borrowings (unless --keep)
3. Creates sample books
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from catalogue.config import get_settings
from catalogue.database import Database
from catalogue.models import Book, Borrowing

BOOKS_DATA = [
    {
        "title": "1984",
        "author": "George Orwell",
        "isbn": "9780451524935",
        "genre": "Dystopian",
        "publication_year": 1949,
        "publisher": "Secker & Warburg",
        "description": "A dystopian novel set in a totalitarian society ruled by Big Brother.",
    },
    {
        "title": "Animal Farm",
        "author": "George Orwell",
        "isbn": "9780451526342",
        "genre": "Political Satire",
        "publication_year": 1945,
        "publisher": "Secker & Warburg",
        "description": "An allegorical novella reflecting events leading up to the Russian Revolution.",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "isbn": "9780141439518",
        "genre": "Romance",
        "publication_year": 1813,
        "publisher": "T. Egerton",
        "description": "A romantic novel following Elizabeth Bennet and Mr. Darcy.",
    },
    {
        "title": "The Old Man and the Sea",
        "author": "Ernest Hemingway",
        "isbn": "9780684801223",
        "genre": "Classic Literature",
        "publication_year": 1952,
        "publisher": "Charles Scribner's Sons",
        "description": "An aging Cuban fisherman struggles with a giant marlin.",
    },
    {
        "title": "Murder on the Orient Express",
        "author": "Agatha Christie",
        "isbn": "9780062693662",
        "genre": "Mystery",
        "publication_year": 1934,
        "publisher": "Collins Crime Club",
        "description": "Hercule Poirot investigates a murder aboard a snowbound train.",
    },
    {
        "title": "Foundation",
        "author": "Isaac Asimov",
        "isbn": "9780553293357",
        "genre": "Science Fiction",
        "publication_year": 1951,
        "publisher": "Gnome Press",
        "description": "A mathematician foresees the fall of the Galactic Empire.",
    },
    {
        "title": "I, Robot",
        "author": "Isaac Asimov",
        "isbn": "9780553382563",
        "genre": "Science Fiction",
        "publication_year": 1950,
        "publisher": "Gnome Press",
        "description": "Stories exploring the Three Laws of Robotics.",
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "isbn": "9780547928227",
        "genre": "Fantasy",
        "publication_year": 1937,
        "publisher": "George Allen & Unwin",
        "description": "Bilbo Baggins joins a company of dwarves on a quest for treasure.",
    },
]


def clear_data(db: Session) -> None:
    """Remove all books and borrowings."""
    print("Clearing existing books and borrowings...")
    db.execute(delete(Borrowing))
    db.execute(delete(Book))
    db.commit()
    print("Data cleared.")


def create_books(db: Session) -> list[Book]:
    """Create the sample books, skipping ISBNs already in the catalogue."""
    print("Creating books...")
    existing = set(db.execute(select(Book.isbn).where(Book.isbn.is_not(None))).scalars())

    books = []
    for data in BOOKS_DATA:
        if data["isbn"] in existing:
            continue
        book = Book(**data, available=True)
        db.add(book)
        books.append(book)

    db.commit()
    for book in books:
        db.refresh(book)

    print(f"Created {len(books)} books.")
    return books


def seed_database(clear_existing: bool = True) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    settings = get_settings()
    database = Database(settings.database_url)

    # Create tables if they don't exist
    database.create_tables()

    db = database.session()

    try:
        if clear_existing:
            clear_data(db)

        books = create_books(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Books: {len(books)}")
        print(f"\nYou can now access the API at http://localhost:{settings.port}")
        print(f"API documentation at http://localhost:{settings.port}/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    seed_database(clear_existing="--keep" not in sys.argv[1:])
