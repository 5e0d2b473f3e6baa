# Import all models here so they're registered with SQLAlchemy
from bookclub.models.member import Member
from bookclub.models.book import Book, BookComment
from bookclub.models.meet import Meet, PHASES
from bookclub.models.candidate import Candidate, CandidateVote
from bookclub.models.date_option import DateOption, DateVote, AVAILABILITY_VALUES
from bookclub.models.top5 import Top5Entry

__all__ = ['Member', 'Book', 'BookComment', 'Meet', 'PHASES', 'Candidate', 'CandidateVote',
           'DateOption', 'DateVote', 'AVAILABILITY_VALUES', 'Top5Entry']
