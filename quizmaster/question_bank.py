"""
Built-in question bank shipped with the application.
"""
from typing import List, Tuple

from .models import Category, Difficulty, Question


def _question(category: str, text: str, options: List[str], correct_answer: int,
              difficulty: Difficulty) -> Question:
    return Question(
        category=category,
        text=text,
        options=tuple(options),
        correct_answer=correct_answer,
        difficulty=difficulty
    )


GENERAL_KNOWLEDGE = [
    _question("General Knowledge", "What is the capital of France?",
              ["London", "Berlin", "Paris", "Madrid"], 2, Difficulty.EASY),
    _question("General Knowledge", "Which planet is known as the Red Planet?",
              ["Venus", "Mars", "Jupiter", "Saturn"], 1, Difficulty.EASY),
    _question("General Knowledge", "What is the largest mammal in the world?",
              ["African Elephant", "Blue Whale", "Giraffe", "Polar Bear"], 1, Difficulty.EASY),
    _question("General Knowledge", "How many continents are there on Earth?",
              ["5", "6", "7", "8"], 2, Difficulty.EASY),
    _question("General Knowledge", "What is the chemical symbol for gold?",
              ["Go", "Gd", "Au", "Ag"], 2, Difficulty.MEDIUM),
]

SCIENCE = [
    _question("Science", "What is the chemical formula for water?",
              ["CO2", "H2O", "O2", "N2"], 1, Difficulty.EASY),
    _question("Science", "What is the powerhouse of the cell?",
              ["Nucleus", "Mitochondria", "Ribosome", "Golgi Apparatus"], 1, Difficulty.EASY),
    _question("Science", "What is the speed of light?",
              ["300,000 km/s", "150,000 km/s", "500,000 km/s", "1,000,000 km/s"], 0, Difficulty.MEDIUM),
    _question("Science", "Which element has the atomic number 1?",
              ["Helium", "Hydrogen", "Oxygen", "Carbon"], 1, Difficulty.EASY),
    _question("Science", "What is the hardest natural substance on Earth?",
              ["Gold", "Iron", "Diamond", "Platinum"], 2, Difficulty.EASY),
]

HISTORY = [
    _question("History", "In which year did World War II end?",
              ["1943", "1945", "1947", "1950"], 1, Difficulty.MEDIUM),
    _question("History", "Who was the first President of the United States?",
              ["Thomas Jefferson", "John Adams", "George Washington", "Abraham Lincoln"], 2, Difficulty.EASY),
    _question("History", "Which ancient civilization built the Great Pyramids?",
              ["Greeks", "Romans", "Egyptians", "Mayans"], 2, Difficulty.EASY),
    _question("History", "When was the Declaration of Independence signed?",
              ["1776", "1789", "1791", "1801"], 0, Difficulty.MEDIUM),
    _question("History", "Who painted the Mona Lisa?",
              ["Vincent van Gogh", "Pablo Picasso", "Leonardo da Vinci", "Michelangelo"], 2, Difficulty.EASY),
]

ENTERTAINMENT = [
    _question("Entertainment", "Who played Jack in Titanic?",
              ["Brad Pitt", "Johnny Depp", "Leonardo DiCaprio", "Tom Cruise"], 2, Difficulty.EASY),
    _question("Entertainment", "Which band wrote 'Bohemian Rhapsody'?",
              ["The Beatles", "Queen", "Led Zeppelin", "Pink Floyd"], 1, Difficulty.MEDIUM),
    _question("Entertainment", "What is the highest-grossing film of all time?",
              ["Avatar", "Avengers: Endgame", "Titanic", "Star Wars: The Force Awakens"], 1, Difficulty.MEDIUM),
    _question("Entertainment", "Which TV series features the character Walter White?",
              ["The Sopranos", "Breaking Bad", "The Wire", "Game of Thrones"], 1, Difficulty.EASY),
    _question("Entertainment", "Who is known as the 'King of Pop'?",
              ["Elvis Presley", "Michael Jackson", "Prince", "Madonna"], 1, Difficulty.EASY),
]

# Display counts are catalog metadata, independent of the list lengths above.
BUILTIN_CATEGORIES: List[Tuple[Category, List[Question]]] = [
    (Category(name="General Knowledge", icon="globe", question_count=10), GENERAL_KNOWLEDGE),
    (Category(name="Science", icon="atom", question_count=15), SCIENCE),
    (Category(name="History", icon="book.closed", question_count=12), HISTORY),
    (Category(name="Entertainment", icon="tv", question_count=8), ENTERTAINMENT),
]
