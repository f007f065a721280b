"""
Demo: Build the example feedback survey, print its response report and export CSV.
"""

from surveykit.aggregator import ChoiceSummary, NumericSummary, summarize_survey
from surveykit.examples import build_example_feedback_survey
from surveykit.export import export_filename, export_responses


def print_report(report):
    """Pretty-print a SurveyReport."""
    print()
    print("=" * 70)
    print(f"SURVEY RESPONSES: {report.survey_title}")
    print("=" * 70)
    print()

    print("📊 BASIC METRICS")
    print(f"  Total Responses:       {report.total_responses}")
    print(f"  Questions:             {report.total_questions}")
    print(f"  Completion Rate:       {report.completion_rate:.0f}%")
    print()

    print("📈 RESPONSE SUMMARY")
    for entry in report.questions:
        print(f"  {entry.number}. {entry.title}")
        summary = entry.summary
        if isinstance(summary, NumericSummary):
            print(f"     Average: {summary.average}   Responses: {summary.count}")
        elif isinstance(summary, ChoiceSummary):
            for option, count in summary.counts.items():
                share = summary.share(option, report.total_responses) * 100
                print(f"     {option:<20} {count:>3}  ({share:.0f}%)")
        else:
            print(f"     {summary.total_responses} text responses received")
    print()


if __name__ == "__main__":
    store = build_example_feedback_survey()
    survey = store.current_survey
    responses = store.responses_for(survey.id)

    print_report(summarize_survey(survey, responses))

    filename = export_filename(survey)
    with open(filename, "w", encoding="utf-8") as f:
        f.write(export_responses(survey, responses, store.config.export_date_format))
    print(f"✅ Responses exported to {filename}")
