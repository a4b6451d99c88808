import datetime
from ..extensions import db


class Revision(db.Model):
    __tablename__ = "revisions"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False, index=True)
    note = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)

    project = db.relationship("Project", backref=db.backref("revisions", lazy=True))

    def __repr__(self):
        return f"<Revision {self.id} - Project {self.project_id}>"
