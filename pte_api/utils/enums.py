import enum


class Role(str, enum.Enum):
    student = "student"
    teacher = "teacher"
    admin = "admin"


class PlanType(str, enum.Enum):
    free = "free"
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"


class SubscriptionStatus(str, enum.Enum):
    active = "active"
    cancelled = "cancelled"
    expired = "expired"


class Section(str, enum.Enum):
    speaking = "speaking"
    writing = "writing"
    reading = "reading"
    listening = "listening"


class PteTestType(str, enum.Enum):
    mock = "mock"
    practice = "practice"
    section = "section"


class Difficulty(str, enum.Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class AttemptStatus(str, enum.Enum):
    in_progress = "in_progress"
    completed = "completed"
    abandoned = "abandoned"


class PracticeStage(str, enum.Enum):
    # Mirrors the recorder flow: idle -> preparing -> recording -> processing -> complete
    idle = "idle"
    preparing = "preparing"
    recording = "recording"
    processing = "processing"
    complete = "complete"
    failed = "failed"


class ConversationStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    abandoned = "abandoned"
    error = "error"


class TurnRole(str, enum.Enum):
    user = "user"
    assistant = "assistant"
    system = "system"


class UsageType(str, enum.Enum):
    scoring = "scoring"
    realtime = "realtime"


class QuestionType(str, enum.Enum):
    # Speaking
    read_aloud = "read_aloud"
    repeat_sentence = "repeat_sentence"
    describe_image = "describe_image"
    retell_lecture = "retell_lecture"
    answer_short_question = "answer_short_question"
    respond_to_a_situation = "respond_to_a_situation"
    summarize_group_discussion = "summarize_group_discussion"
    # Writing
    summarize_written_text = "summarize_written_text"
    write_essay = "write_essay"
    # Reading
    reading_writing_fill_in_blanks = "reading_writing_fill_in_blanks"
    reading_fill_in_blanks = "reading_fill_in_blanks"
    reading_multiple_choice_single = "reading_multiple_choice_single"
    reading_multiple_choice_multiple = "reading_multiple_choice_multiple"
    reorder_paragraphs = "reorder_paragraphs"
    # Listening
    summarize_spoken_text = "summarize_spoken_text"
    listening_multiple_choice_single = "listening_multiple_choice_single"
    listening_multiple_choice_multiple = "listening_multiple_choice_multiple"
    listening_fill_in_blanks = "listening_fill_in_blanks"
    highlight_correct_summary = "highlight_correct_summary"
    select_missing_word = "select_missing_word"
    highlight_incorrect_words = "highlight_incorrect_words"
    write_from_dictation = "write_from_dictation"


SPEAKING_TYPES = {
    QuestionType.read_aloud,
    QuestionType.repeat_sentence,
    QuestionType.describe_image,
    QuestionType.retell_lecture,
    QuestionType.answer_short_question,
    QuestionType.respond_to_a_situation,
    QuestionType.summarize_group_discussion,
}

# Task types whose response is free text judged by an AI examiner
WRITING_TYPES = {
    QuestionType.summarize_written_text,
    QuestionType.write_essay,
    QuestionType.summarize_spoken_text,
}

QUESTION_SECTIONS: dict[QuestionType, Section] = {
    **{qt: Section.speaking for qt in SPEAKING_TYPES},
    QuestionType.summarize_written_text: Section.writing,
    QuestionType.write_essay: Section.writing,
    QuestionType.reading_writing_fill_in_blanks: Section.reading,
    QuestionType.reading_fill_in_blanks: Section.reading,
    QuestionType.reading_multiple_choice_single: Section.reading,
    QuestionType.reading_multiple_choice_multiple: Section.reading,
    QuestionType.reorder_paragraphs: Section.reading,
    QuestionType.summarize_spoken_text: Section.listening,
    QuestionType.listening_multiple_choice_single: Section.listening,
    QuestionType.listening_multiple_choice_multiple: Section.listening,
    QuestionType.listening_fill_in_blanks: Section.listening,
    QuestionType.highlight_correct_summary: Section.listening,
    QuestionType.select_missing_word: Section.listening,
    QuestionType.highlight_incorrect_words: Section.listening,
    QuestionType.write_from_dictation: Section.listening,
}

# Maximum recording length per speaking task, in seconds
RECORDING_LIMIT_SECONDS: dict[QuestionType, int] = {
    QuestionType.read_aloud: 40,
    QuestionType.repeat_sentence: 15,
    QuestionType.describe_image: 40,
    QuestionType.retell_lecture: 40,
    QuestionType.answer_short_question: 10,
    QuestionType.respond_to_a_situation: 40,
    QuestionType.summarize_group_discussion: 120,
}


def is_ai_scored(question_type: str) -> bool:
    try:
        qt = QuestionType(question_type)
    except ValueError:
        return False
    return qt in SPEAKING_TYPES or qt in WRITING_TYPES
