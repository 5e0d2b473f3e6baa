"""
Book routes - the shared reading list and book comments.
"""

from flask import Blueprint, jsonify, g

from bookclub.services import books
from bookclub.routes.api import json_body, member_required

books_bp = Blueprint('books', __name__, url_prefix='/api/books')


@books_bp.route('', methods=['GET'])
@member_required
def list_books():
    return jsonify(books.list_books())


@books_bp.route('', methods=['POST'])
@member_required
def create_book():
    book = books.create_book(g.actor, json_body())
    return jsonify(book), 201


@books_bp.route('/<int:book_id>', methods=['GET'])
@member_required
def book_detail(book_id):
    return jsonify(books.book_detail(book_id))


@books_bp.route('/<int:book_id>', methods=['PUT'])
@member_required
def update_book(book_id):
    return jsonify(books.update_book(book_id, g.actor, json_body()))


@books_bp.route('/<int:book_id>', methods=['DELETE'])
@member_required
def delete_book(book_id):
    return jsonify(books.delete_book(book_id, g.actor))


@books_bp.route('/<int:book_id>/comments', methods=['POST'])
@member_required
def add_comment(book_id):
    content = json_body().get('content')
    return jsonify(books.add_comment(book_id, g.actor, content)), 201
