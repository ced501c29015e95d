"""Quiz services.

Key modules:
- models.py: Quiz, Question, Attempt and Invitation models
- validator.py: Structural checks on raw quiz / question dicts
- parser.py: Model reply to quiz / question / verification payloads
- generator.py: Generation, verification and regeneration pipeline
- authoring.py: Manual creation and edits
- scoring.py: Grading attempts
- invitations.py: Inviting students and answering invitations
- errors.py: Error taxonomy with HTTP status codes
"""
